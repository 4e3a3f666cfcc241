"""
Scheduled publication workflow.

A post authored with a future ``publish_at`` stays a draft until that time
has passed. Two independent triggers act on it:

- Read path: auto_publish_on_read() publishes a due draft when it is read
  and hands back the re-fetched document. It is a before-read hook, not a
  poller; the cron batch publish_scheduled() covers posts nobody reads.
- Change path: schedule_cache_revalidation() enqueues a RevalidationTask for
  ``publish_at + delay`` when a post is saved as published with a future
  publish time, so cached pages refresh once the post goes live.

Key behaviors:
- draft -> published only when publish_at <= now; never backwards
- Missing or malformed timestamps mean "not due"
- Failures are logged and swallowed: a read always returns a document, a
  save never fails because of the queue
- The transition is at-least-once and convergent (concurrent readers may
  both write status=published)
- Enqueue has no de-duplication: saving a scheduled post twice enqueues two
  tasks; the task handler is idempotent
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID

from gazeta.components.revalidation import (
    revalidate_active_posts,
    revalidate_post_pages,
)
from gazeta.domain.entities import Post, RevalidationTask, as_utc
from gazeta.ports.cache import CacheRevalidatorPort
from gazeta.ports.clock import ClockPort
from gazeta.ports.queue import TaskQueuePort
from gazeta.ports.repo import CategoryRepoPort, PostRepoPort

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class SchedulerConfig:
    """Scheduling configuration from rules."""

    revalidation_delay_seconds: int = 10

    # Cron batch
    publish_batch_limit: int = 20
    active_batch_limit: int = 50
    lookback_hours: int = 24


DEFAULT_CONFIG = SchedulerConfig()


# --- Results ---


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a draft -> published write."""

    success: bool
    post: Post
    error: str | None = None


@dataclass(frozen=True)
class TaskResult:
    """Outcome of one revalidation task run."""

    success: bool
    task_id: UUID
    message: str
    error: str | None = None


@dataclass(frozen=True)
class BatchPublishResult:
    """Outcome of the publish-scheduled cron batch."""

    published: int
    revalidated: int
    checked: int
    failed_ids: tuple[UUID, ...] = field(default_factory=tuple)


# --- Predicates ---


def _timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return as_utc(value)
    return None


def is_due(post: Post, now: datetime) -> bool:
    """A draft whose publish time has passed."""
    publish_at = _timestamp(post.publish_at)
    if post.status != "draft" or publish_at is None:
        return False
    return publish_at <= as_utc(now)


def needs_revalidation_schedule(post: Post, now: datetime) -> bool:
    """Published with a publish time strictly in the future."""
    publish_at = _timestamp(post.publish_at)
    if post.status != "published" or publish_at is None:
        return False
    return publish_at > as_utc(now)


def revalidation_run_at(publish_at: datetime, delay_seconds: int) -> datetime:
    return as_utc(publish_at) + timedelta(seconds=delay_seconds)


# --- Transition ---


def transition(post: Post, store: PostRepoPort) -> TransitionResult:
    """
    Write status=published for ``post`` and re-fetch it.

    Does not check is_due(); callers decide. Never raises.
    """
    try:
        store.update_by_id(post.id, {"status": "published"})
        updated = store.get_by_id(post.id)
    except Exception as e:
        return TransitionResult(success=False, post=post, error=str(e))

    if updated is None:
        return TransitionResult(
            success=False, post=post, error=f"Post {post.id} vanished after update"
        )

    return TransitionResult(success=True, post=updated)


# --- Lifecycle hooks ---


def auto_publish_on_read(
    post: Post | None,
    *,
    store: PostRepoPort,
    clock: ClockPort,
) -> Post | None:
    """
    Before-read hook.

    Publishes a due draft and returns the updated document in place of the
    stale one. On failure the original draft is returned; the next read
    retries.
    """
    if post is None or not is_due(post, clock.now_utc()):
        return post

    result = transition(post, store)
    if not result.success:
        logger.error("Failed to auto-publish post %s: %s", post.id, result.error)
        return post

    logger.info('Auto-published scheduled post: "%s" (ID: %s)', post.title, post.id)
    return result.post


def schedule_cache_revalidation(
    post: Post,
    *,
    queue: TaskQueuePort,
    clock: ClockPort,
    delay_seconds: int = DEFAULT_CONFIG.revalidation_delay_seconds,
) -> RevalidationTask | None:
    """
    After-change hook.

    Enqueues one RevalidationTask at publish_at + delay for a post saved as
    published with a future publish time. Returns the task, or None when
    nothing was enqueued (condition not met or enqueue failed).
    """
    if not needs_revalidation_schedule(post, clock.now_utc()):
        return None

    run_at = revalidation_run_at(post.publish_at, delay_seconds)  # type: ignore[arg-type]
    task = RevalidationTask(run_at=run_at, target_id=post.id, target_slug=post.slug)

    try:
        queued = queue.enqueue(task)
    except Exception as e:
        logger.error("Failed to schedule cache revalidation for post %s: %s", post.id, e)
        return None

    logger.info(
        'Scheduled cache revalidation for post "%s" (ID: %s) at %s',
        post.title,
        post.id,
        run_at.isoformat(),
    )
    return queued


# --- Job runner handler ---


def revalidate_cache_task(
    task: RevalidationTask,
    *,
    store: PostRepoPort,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    clock: ClockPort,
) -> TaskResult:
    """
    Execute a RevalidationTask.

    Revalidates only once the post is live (published, publish_at <= now);
    otherwise reports "not ready" without touching the cache.
    """
    try:
        post = store.get_by_id(task.target_id)
    except Exception as e:
        logger.error("Error in revalidate_cache task %s: %s", task.id, e)
        return TaskResult(
            success=False, task_id=task.id, message="Lookup failed", error=str(e)
        )

    if post is None:
        logger.error("Post %s not found for cache revalidation", task.target_id)
        return TaskResult(
            success=False,
            task_id=task.id,
            message=f"Post {task.target_id} not found",
            error="not_found",
        )

    publish_at = _timestamp(post.publish_at)
    live = (
        post.status == "published"
        and publish_at is not None
        and publish_at <= as_utc(clock.now_utc())
    )
    if not live:
        logger.info(
            'Post "%s" (ID: %s) is not ready for revalidation yet', post.title, post.id
        )
        return TaskResult(
            success=False,
            task_id=task.id,
            message=f"Post {post.id} is not live yet",
            error="not_ready",
        )

    report = revalidate_post_pages(
        post, categories=categories, revalidator=revalidator, action="publish"
    )
    logger.info('Cache revalidated for post "%s" (ID: %s)', post.title, post.id)
    return TaskResult(
        success=True,
        task_id=task.id,
        message=f"Revalidated {len(report.revalidated)} paths for post {post.id}",
    )


# --- Cron batch ---


def publish_scheduled(
    *,
    store: PostRepoPort,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    clock: ClockPort,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> BatchPublishResult:
    """
    Publish every due draft, then refresh pages of posts that went live.

    A post failing to publish is logged and skipped; the batch continues.
    Lookup failures propagate to the caller.
    """
    now = clock.now_utc()

    due = store.find(status="draft", publish_until=now, limit=config.publish_batch_limit)

    published = 0
    failed: list[UUID] = []
    for post in due:
        result = transition(post, store)
        if result.success:
            logger.info('Auto-published scheduled post: "%s" (ID: %s)', post.title, post.id)
            published += 1
        else:
            logger.error("Failed to auto-publish post %s: %s", post.id, result.error)
            failed.append(post.id)

    active = store.find(
        status="published",
        publish_after=now - timedelta(hours=config.lookback_hours),
        publish_until=now,
        limit=config.active_batch_limit,
    )
    logger.info("Checking for posts that became active: found %d posts", len(active))

    revalidated = revalidate_active_posts(
        active, revalidator=revalidator, categories=categories
    )

    return BatchPublishResult(
        published=published,
        revalidated=revalidated,
        checked=len(due) + len(active),
        failed_ids=tuple(failed),
    )
