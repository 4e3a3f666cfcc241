"""
Scheduler component - Scheduled publishing and deferred cache revalidation.
"""

from ._impl import (
    BatchPublishResult,
    SchedulerConfig,
    TaskResult,
    TransitionResult,
    auto_publish_on_read,
    is_due,
    needs_revalidation_schedule,
    publish_scheduled,
    revalidate_cache_task,
    revalidation_run_at,
    schedule_cache_revalidation,
    transition,
)
from .component import (
    run,
    run_auto_publish,
    run_publish_scheduled,
    run_revalidate_task,
    run_schedule_revalidation,
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
from .ports import RulesPort

__all__ = [
    # Entry points
    "run",
    "run_auto_publish",
    "run_publish_scheduled",
    "run_revalidate_task",
    "run_schedule_revalidation",
    # Input models
    "AutoPublishInput",
    "PublishScheduledInput",
    "RunTaskInput",
    "ScheduleRevalidationInput",
    # Output models
    "AutoPublishOutput",
    "PublishScheduledOutput",
    "RunTaskOutput",
    "ScheduleRevalidationOutput",
    "SchedulerValidationError",
    # Ports
    "RulesPort",
    # Workflow
    "BatchPublishResult",
    "SchedulerConfig",
    "TaskResult",
    "TransitionResult",
    "auto_publish_on_read",
    "is_due",
    "needs_revalidation_schedule",
    "publish_scheduled",
    "revalidate_cache_task",
    "revalidation_run_at",
    "schedule_cache_revalidation",
    "transition",
]
