"""
Dev Task Runner Adapter.

In-process runner for deferred revalidation tasks.
Uses DB polling for task claims with synchronous execution.

Production hands the queue to an external job runner; this provides
equivalent at-least-once execution for local development.

Key behaviors:
- Atomic task claim via a single UPDATE ... RETURNING
- Tasks never run before run_at
- A task whose post is not live yet fails without retry by default (a later
  save enqueues a new one); with more attempts configured, a failed task is
  re-queued with run_at pushed back by the retry delay
- Configurable poll interval for background mode
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

from gazeta.adapters.clock import SystemClock
from gazeta.components.scheduler import TaskResult, revalidate_cache_task
from gazeta.domain.entities import RevalidationTask
from gazeta.ports.cache import CacheRevalidatorPort
from gazeta.ports.clock import ClockPort
from gazeta.ports.queue import TaskRepoPort
from gazeta.ports.repo import CategoryRepoPort, PostRepoPort

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    """Task execution result status."""

    SUCCESS = "success"
    FAILURE = "failure"
    NO_TASKS = "no_tasks"


@dataclass
class RunResult:
    """Result of one task execution attempt."""

    status: RunStatus
    task_id: UUID | None = None
    message: str = ""
    error: str | None = None
    execution_time_ms: int = 0


@dataclass
class BatchResult:
    """Result of processing a batch of tasks."""

    total_processed: int
    succeeded: int
    failed: int
    results: list[RunResult]


TaskHandler = Callable[[RevalidationTask], TaskResult]


class DevTaskExecutor:
    """Runs one task through a handler, converting exceptions to failures."""

    def __init__(self, handler: TaskHandler) -> None:
        self._handler = handler

    def execute(self, task: RevalidationTask) -> RunResult:
        start_time = time.monotonic()

        try:
            result = self._handler(task)
            elapsed_ms = int((time.monotonic() - start_time) * 1000)

            if result.success:
                return RunResult(
                    status=RunStatus.SUCCESS,
                    task_id=task.id,
                    message=result.message,
                    execution_time_ms=elapsed_ms,
                )
            else:
                return RunResult(
                    status=RunStatus.FAILURE,
                    task_id=task.id,
                    message=result.message,
                    error=result.error or "Task handler reported failure",
                    execution_time_ms=elapsed_ms,
                )

        except Exception as e:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            return RunResult(
                status=RunStatus.FAILURE,
                task_id=task.id,
                message=f"Exception during {task.task_slug} for {task.target_id}",
                error=str(e),
                execution_time_ms=elapsed_ms,
            )


class DevTaskRunner:
    """
    Dev task runner using DB polling.

    Claims due tasks one at a time, executes them, and records the outcome.
    """

    def __init__(
        self,
        task_repo: TaskRepoPort,
        executor: DevTaskExecutor,
        clock: ClockPort,
        max_attempts: int = 1,
        retry_delay_seconds: int = 60,
    ) -> None:
        self._task_repo = task_repo
        self._executor = executor
        self._clock = clock
        self._max_attempts = max_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._worker_id = f"dev-{uuid4().hex[:8]}"

    def run_due_tasks(
        self,
        worker_id: str | None = None,
        max_tasks: int = 10,
    ) -> BatchResult:
        """Process tasks whose run_at is at or before now."""
        worker_id = worker_id or self._worker_id
        now_utc = self._clock.now_utc()

        results: list[RunResult] = []
        succeeded = 0
        failed = 0

        for _ in range(max_tasks):
            task = self._task_repo.claim_next_due(worker_id, now_utc)
            if task is None:
                break

            result = self._execute_and_update(task, now_utc)
            results.append(result)

            if result.status == RunStatus.SUCCESS:
                succeeded += 1
            else:
                failed += 1

        if not results:
            return BatchResult(
                total_processed=0,
                succeeded=0,
                failed=0,
                results=[RunResult(status=RunStatus.NO_TASKS, message="No tasks to process")],
            )

        return BatchResult(
            total_processed=len(results),
            succeeded=succeeded,
            failed=failed,
            results=results,
        )

    def _execute_and_update(self, task: RevalidationTask, now_utc: datetime) -> RunResult:
        task = task.model_copy(update={"attempts": task.attempts + 1})
        self._task_repo.save(task)

        result = self._executor.execute(task)

        if result.status == RunStatus.SUCCESS:
            task = task.model_copy(
                update={"status": "succeeded", "completed_at": now_utc, "error_message": None}
            )
        elif task.attempts < self._max_attempts:
            # Back to the queue, not claimable again until the retry delay passes
            task = task.model_copy(
                update={
                    "status": "queued",
                    "claimed_by": None,
                    "error_message": result.error,
                    "run_at": now_utc + timedelta(seconds=self._retry_delay_seconds),
                }
            )
        else:
            task = task.model_copy(
                update={"status": "failed", "completed_at": now_utc, "error_message": result.error}
            )

        self._task_repo.save(task)
        return result


class DevTaskScheduler:
    """
    Dev scheduler with background polling.

    Runs a background thread that polls for due tasks
    at a configurable interval.
    """

    def __init__(
        self,
        runner: DevTaskRunner,
        poll_interval_seconds: float = 60.0,
    ) -> None:
        self._runner = runner
        self._poll_interval = poll_interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def start(self) -> None:
        """Start the background scheduler."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Dev task scheduler started (poll interval: %.1fs)", self._poll_interval)

    def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Dev task scheduler stopped")

    def trigger_now(self) -> BatchResult:
        """Trigger immediate task processing."""
        return self._runner.run_due_tasks()

    @property
    def is_running(self) -> bool:
        return self._running

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._poll_interval):
            try:
                result = self._runner.run_due_tasks()
                if result.total_processed > 0:
                    logger.info(
                        "Task scheduler processed %d tasks: %d succeeded, %d failed",
                        result.total_processed,
                        result.succeeded,
                        result.failed,
                    )
            except Exception:
                logger.exception("Error in task scheduler poll loop")


# Factory functions


def create_dev_task_runner(
    task_repo: TaskRepoPort,
    *,
    store: PostRepoPort,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    clock: ClockPort | None = None,
    max_attempts: int = 1,
    retry_delay_seconds: int = 60,
) -> DevTaskRunner:
    """
    Create a dev task runner wired to the revalidate_cache handler.

    Args:
        task_repo: Queue repository for claims and status updates
        store: Post repository the handler reads from
        categories: Category repository for category paths
        revalidator: Cache revalidator port
        clock: Clock (defaults to system UTC)
        max_attempts: Attempts before a task is marked failed
        retry_delay_seconds: Delay before a failed task is claimable again

    Returns:
        Configured DevTaskRunner
    """
    task_clock: ClockPort = clock or SystemClock()

    def handler(task: RevalidationTask) -> TaskResult:
        return revalidate_cache_task(
            task,
            store=store,
            categories=categories,
            revalidator=revalidator,
            clock=task_clock,
        )

    return DevTaskRunner(
        task_repo, DevTaskExecutor(handler), task_clock, max_attempts, retry_delay_seconds
    )


def create_dev_scheduler(
    runner: DevTaskRunner,
    poll_interval_seconds: float = 60.0,
) -> DevTaskScheduler:
    return DevTaskScheduler(runner, poll_interval_seconds)
