from datetime import datetime
from typing import Protocol

from gazeta.domain.entities import RevalidationTask


class TaskQueuePort(Protocol):
    """
    Deferred task queue.

    Delivery is at-least-once at or after ``task.run_at``. The queue does
    not de-duplicate: enqueueing the same target twice yields two tasks.
    """

    def enqueue(self, task: RevalidationTask) -> RevalidationTask:
        """Persist the task. Raises QueueError on failure."""
        ...


class TaskRepoPort(TaskQueuePort, Protocol):
    """Runner-side view of the queue."""

    def save(self, task: RevalidationTask) -> RevalidationTask:
        ...

    def claim_next_due(self, worker_id: str, now_utc: datetime) -> RevalidationTask | None:
        """Atomically move the oldest due queued task to 'running'."""
        ...
