"""
Post document pipeline.

PostService is the read/change path the lifecycle hooks are attached to:

    read:   store -> auto_publish_on_read [-> revalidate_post if published]
                  -> populate_authors -> caller
    change: resolve_slug -> store -> schedule_cache_revalidation
                                  -> revalidate_post
    delete: store -> revalidate_delete

Hooks degrade to no-ops on failure; only the store write of save() and
delete() can fail the call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from gazeta.components.revalidation import revalidate_delete, revalidate_post
from gazeta.components.scheduler import auto_publish_on_read, schedule_cache_revalidation
from gazeta.components.search import expand_bounded, resolve_slug
from gazeta.domain.entities import AuthorRef, Post
from gazeta.ports.cache import CacheRevalidatorPort
from gazeta.ports.clock import ClockPort
from gazeta.ports.queue import TaskQueuePort
from gazeta.ports.repo import AuthorRepoPort, CategoryRepoPort, PostRepoPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostConfig:
    """Post pipeline configuration from rules."""

    revalidation_delay_seconds: int = 10
    max_variants: int = 4096
    search_limit: int = 20


def populate_authors(post: Post | None, authors: AuthorRepoPort) -> Post | None:
    """After-read hook: attach ``{id, name}`` of the referenced authors."""
    if post is None:
        return None

    if not post.authors:
        return post.model_copy(update={"populated_authors": []})

    try:
        found = authors.list_by_ids(post.authors)
    except Exception as e:
        logger.error("Failed to populate authors for post %s: %s", post.id, e)
        return post

    by_id = {a.id: a for a in found}
    refs = [
        AuthorRef(id=author_id, name=by_id[author_id].name)
        for author_id in post.authors
        if author_id in by_id
    ]
    return post.model_copy(update={"populated_authors": refs})


class PostService:
    def __init__(
        self,
        store: PostRepoPort,
        categories: CategoryRepoPort,
        authors: AuthorRepoPort,
        queue: TaskQueuePort,
        revalidator: CacheRevalidatorPort,
        clock: ClockPort,
        config: PostConfig | None = None,
    ):
        self.store = store
        self.categories = categories
        self.authors = authors
        self.queue = queue
        self.revalidator = revalidator
        self.clock = clock
        self.config = config or PostConfig()

    # --- Read path ---

    def _after_read(self, post: Post | None) -> Post | None:
        current = auto_publish_on_read(post, store=self.store, clock=self.clock)
        if post is not None and current is not None and current.status != post.status:
            # Published by this read: refresh the pages it now appears on
            revalidate_post(
                current,
                post,
                categories=self.categories,
                revalidator=self.revalidator,
            )
        return populate_authors(current, self.authors)

    def get(self, post_id: UUID) -> Post | None:
        return self._after_read(self.store.get_by_id(post_id))

    def get_by_slug(self, slug: str) -> Post | None:
        return self._after_read(self.store.get_by_slug(slug))

    # --- Change path ---

    def save(
        self,
        post: Post,
        *,
        previous: Post | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Post:
        """
        Persist ``post`` and run the after-change hooks.

        ``previous`` defaults to the stored version; its absence means the
        post is being created.
        """
        if previous is None:
            previous = self.store.get_by_id(post.id)
        operation = "create" if previous is None else "update"

        slug = resolve_slug(
            post.slug or None,
            fallback=post.title,
            slug_lock=post.slug_lock,
            operation=operation,
            has_slug=bool(post.slug),
        )
        post = post.model_copy(
            update={
                "slug": slug if isinstance(slug, str) else "",
                "updated_at": self.clock.now_utc(),
                "populated_authors": [],
            }
        )

        saved = self.store.save(post)

        schedule_cache_revalidation(
            saved,
            queue=self.queue,
            clock=self.clock,
            delay_seconds=self.config.revalidation_delay_seconds,
        )
        revalidate_post(
            saved,
            previous,
            categories=self.categories,
            revalidator=self.revalidator,
            context=context,
        )
        return saved

    def delete(self, post_id: UUID, *, context: Mapping[str, Any] | None = None) -> None:
        post = self.store.get_by_id(post_id)
        if not post:
            raise ValueError("Post not found")

        self.store.delete(post_id)
        revalidate_delete(
            post,
            categories=self.categories,
            revalidator=self.revalidator,
            context=context,
        )

    # --- Search ---

    def search(self, query: str) -> list[Post]:
        """
        Published posts whose title matches any diacritic spelling of ``query``.

        Raises:
            VariantLimitExceeded: if the query expands past the configured cap.
        """
        query = query.strip()
        if not query:
            return []
        variants = expand_bounded(query, self.config.max_variants)
        return self.store.search_titles(sorted(variants), limit=self.config.search_limit)
