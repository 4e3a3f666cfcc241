"""
Scheduler component - Scheduled publication and deferred cache revalidation.

Handles the read-triggered draft -> published transition, revalidation task
scheduling on change, revalidation task execution, and the cron batch.

Invariants:
- I1: A draft is published only when publish_at <= now
- I2: Published posts are never moved back to draft by this component
- I3: One save of a future-published post enqueues exactly one task, at
      publish_at + delay
- I4: Hook failures never propagate to the caller
"""

from __future__ import annotations

import logging

from ._impl import (
    SchedulerConfig,
    is_due,
    publish_scheduled,
    revalidate_cache_task,
    schedule_cache_revalidation,
    transition,
)
from .models import (
    AutoPublishInput,
    AutoPublishOutput,
    PublishScheduledInput,
    PublishScheduledOutput,
    RunTaskInput,
    RunTaskOutput,
    ScheduleRevalidationInput,
    ScheduleRevalidationOutput,
    SchedulerValidationError,
)
from .ports import (
    CacheRevalidatorPort,
    CategoryRepoPort,
    ClockPort,
    PostRepoPort,
    RulesPort,
    TaskQueuePort,
)

logger = logging.getLogger(__name__)


def _build_config(rules: RulesPort | None) -> SchedulerConfig:
    """Build scheduler config from rules port."""
    if rules is None:
        return SchedulerConfig()

    return SchedulerConfig(
        revalidation_delay_seconds=rules.get_revalidation_delay_seconds(),
        publish_batch_limit=rules.get_publish_batch_limit(),
        active_batch_limit=rules.get_active_batch_limit(),
        lookback_hours=rules.get_lookback_hours(),
    )


# --- Component Entry Points ---


def run_auto_publish(
    inp: AutoPublishInput,
    *,
    store: PostRepoPort,
    clock: ClockPort,
) -> AutoPublishOutput:
    """
    Publish a due draft (explicit form of the before-read hook).

    Args:
        inp: Input containing the post as read from the store.
        store: Post repository port.
        clock: Clock port.

    Returns:
        AutoPublishOutput with the post to return to the reader. On a failed
        write the original post is returned with an error attached.
    """
    post = inp.post
    if not is_due(post, clock.now_utc()):
        return AutoPublishOutput(post=post, transitioned=False)

    result = transition(post, store)
    if not result.success:
        logger.error("Failed to auto-publish post %s: %s", post.id, result.error)
        return AutoPublishOutput(
            post=post,
            transitioned=False,
            errors=[
                SchedulerValidationError(
                    code="publish_failed",
                    message=result.error or "Unknown error",
                    post_id=post.id,
                )
            ],
            success=False,
        )

    return AutoPublishOutput(post=result.post, transitioned=True)


def run_schedule_revalidation(
    inp: ScheduleRevalidationInput,
    *,
    queue: TaskQueuePort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> ScheduleRevalidationOutput:
    """
    Enqueue deferred cache revalidation for a future-published post.

    Args:
        inp: Input containing the post after the change.
        queue: Task queue port.
        clock: Clock port.
        rules: Optional rules port for the delay.

    Returns:
        ScheduleRevalidationOutput with the task, or None when the post does
        not qualify or the enqueue failed (logged).
    """
    config = _build_config(rules)
    task = schedule_cache_revalidation(
        inp.post,
        queue=queue,
        clock=clock,
        delay_seconds=config.revalidation_delay_seconds,
    )
    return ScheduleRevalidationOutput(task=task)


def run_revalidate_task(
    inp: RunTaskInput,
    *,
    store: PostRepoPort,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    clock: ClockPort,
) -> RunTaskOutput:
    """
    Execute one revalidation task.

    Returns:
        RunTaskOutput; success is False when the post is missing or not
        live yet.
    """
    result = revalidate_cache_task(
        inp.task,
        store=store,
        categories=categories,
        revalidator=revalidator,
        clock=clock,
    )

    if not result.success:
        return RunTaskOutput(
            task_id=result.task_id,
            message=result.message,
            errors=[
                SchedulerValidationError(
                    code=result.error or "task_failed",
                    message=result.message,
                    post_id=inp.task.target_id,
                )
            ],
            success=False,
        )

    return RunTaskOutput(task_id=result.task_id, message=result.message)


def run_publish_scheduled(
    inp: PublishScheduledInput,
    *,
    store: PostRepoPort,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    clock: ClockPort,
    rules: RulesPort | None = None,
) -> PublishScheduledOutput:
    """
    Run the publish-scheduled cron batch.

    Returns:
        PublishScheduledOutput with counts; one error per post that failed
        to publish. Store lookup failures propagate.
    """
    config = _build_config(rules)
    result = publish_scheduled(
        store=store,
        categories=categories,
        revalidator=revalidator,
        clock=clock,
        config=config,
    )

    errors = [
        SchedulerValidationError(
            code="publish_failed",
            message=f"Failed to auto-publish post {post_id}",
            post_id=post_id,
        )
        for post_id in result.failed_ids
    ]

    return PublishScheduledOutput(
        published=result.published,
        revalidated=result.revalidated,
        checked=result.checked,
        errors=errors,
        success=True,
    )


def run(
    inp: (
        AutoPublishInput
        | ScheduleRevalidationInput
        | RunTaskInput
        | PublishScheduledInput
    ),
    *,
    store: PostRepoPort,
    clock: ClockPort,
    queue: TaskQueuePort | None = None,
    categories: CategoryRepoPort | None = None,
    revalidator: CacheRevalidatorPort | None = None,
    rules: RulesPort | None = None,
) -> (
    AutoPublishOutput
    | ScheduleRevalidationOutput
    | RunTaskOutput
    | PublishScheduledOutput
):
    """
    Main entry point for the scheduler component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, AutoPublishInput):
        return run_auto_publish(inp, store=store, clock=clock)
    elif isinstance(inp, ScheduleRevalidationInput):
        if queue is None:
            raise ValueError("TaskQueuePort is required for scheduling revalidation")
        return run_schedule_revalidation(inp, queue=queue, clock=clock, rules=rules)
    elif isinstance(inp, (RunTaskInput, PublishScheduledInput)):
        if categories is None or revalidator is None:
            raise ValueError(
                "CategoryRepoPort and CacheRevalidatorPort are required for revalidation"
            )
        if isinstance(inp, RunTaskInput):
            return run_revalidate_task(
                inp,
                store=store,
                categories=categories,
                revalidator=revalidator,
                clock=clock,
            )
        return run_publish_scheduled(
            inp,
            store=store,
            categories=categories,
            revalidator=revalidator,
            clock=clock,
            rules=rules,
        )
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
