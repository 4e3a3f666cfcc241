"""
Scheduler component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from gazeta.domain.entities import Post, RevalidationTask

# --- Validation Error ---


@dataclass(frozen=True)
class SchedulerValidationError:
    """Scheduler validation error."""

    code: str
    message: str
    post_id: UUID | None = None


# --- Input Models ---


@dataclass(frozen=True)
class AutoPublishInput:
    """Input for the read-triggered publish check."""

    post: Post


@dataclass(frozen=True)
class ScheduleRevalidationInput:
    """Input for scheduling cache revalidation after a change."""

    post: Post


@dataclass(frozen=True)
class RunTaskInput:
    """Input for executing one revalidation task."""

    task: RevalidationTask


@dataclass(frozen=True)
class PublishScheduledInput:
    """Input for the publish-scheduled cron batch."""


# --- Output Models ---


@dataclass(frozen=True)
class AutoPublishOutput:
    """Output for auto-publish. ``post`` is the document to hand to the reader."""

    post: Post
    transitioned: bool
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ScheduleRevalidationOutput:
    """Output for revalidation scheduling."""

    task: RevalidationTask | None
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RunTaskOutput:
    """Output for a revalidation task run."""

    task_id: UUID
    message: str
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PublishScheduledOutput:
    """Output for the cron batch."""

    published: int
    revalidated: int
    checked: int
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True
