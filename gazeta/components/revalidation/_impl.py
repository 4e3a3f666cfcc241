"""
Cache revalidation of the pages that display a post.

A post appears on its own page, the homepage, the posts index (and its
pagination), the categories index, and each of its category pages. All of
them are revalidated together with the sitemap tag.

Key behaviors:
- Category references that cannot be resolved are logged and skipped
- A failing path does not stop the remaining paths
- Hooks honour context["disable_revalidate"]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from gazeta.domain.entities import Category, Post, RevalidateAction
from gazeta.ports.cache import CacheRevalidatorPort
from gazeta.ports.repo import CategoryRepoPort

logger = logging.getLogger(__name__)

INDEX_PATHS: tuple[str, ...] = ("/", "/posts", "/categories")
SITEMAP_TAG = "posts-sitemap"


@dataclass
class RevalidationReport:
    """Paths revalidated for one post."""

    action: RevalidateAction
    revalidated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


# --- Path resolution ---


def post_path(slug: str) -> str:
    return f"/posts/{slug}"


def category_path(slug: str) -> str:
    return f"/categories/{slug}"


def resolve_categories(post: Post, categories: CategoryRepoPort) -> list[Category]:
    """Load the post's categories, skipping ones that fail or are gone."""
    resolved: list[Category] = []
    for category_id in post.categories:
        try:
            category = categories.get_by_id(category_id)
        except Exception as e:
            logger.error("Failed to fetch category %s: %s", category_id, e)
            continue
        if category is not None and category.slug:
            resolved.append(category)
    return resolved


def post_paths(post: Post, categories: CategoryRepoPort) -> list[str]:
    """Every path that renders ``post``, in revalidation order."""
    paths: list[str] = []
    if post.slug:
        paths.append(post_path(post.slug))
    paths.extend(INDEX_PATHS)
    paths.extend(category_path(c.slug) for c in resolve_categories(post, categories))
    return paths


# --- Revalidation ---


def _revalidate_one(path: str, revalidator: CacheRevalidatorPort) -> None:
    revalidator.revalidate_path(path)
    revalidator.revalidate_path(path, "layout")
    # Pagination pages live under /posts/page/<n>
    if path == "/posts":
        revalidator.revalidate_path(path, "page")


def revalidate_post_pages(
    post: Post,
    *,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    action: RevalidateAction,
) -> RevalidationReport:
    """Revalidate every page showing ``post`` and the sitemap tag."""
    report = RevalidationReport(action=action)

    for path in post_paths(post, categories):
        logger.info("[%s] Revalidating %s", action, path)
        try:
            _revalidate_one(path, revalidator)
            report.revalidated.append(path)
        except Exception as e:
            logger.error("Failed to revalidate %s: %s", path, e)
            report.failed.append(path)

    try:
        revalidator.revalidate_tag(SITEMAP_TAG)
    except Exception as e:
        logger.error("Failed to revalidate tag %s: %s", SITEMAP_TAG, e)
        report.failed.append(SITEMAP_TAG)

    return report


def revalidate_active_posts(
    posts: Iterable[Post],
    *,
    revalidator: CacheRevalidatorPort,
    categories: CategoryRepoPort,
) -> int:
    """
    Revalidate posts that went live since the last cron run.

    Paths are de-duplicated across posts; index paths get page and layout
    scope, the rest page scope only. Returns the number of posts covered.
    """
    posts = list(posts)
    if not posts:
        return 0

    paths: dict[str, None] = {}
    for post in posts:
        if post.slug:
            paths[post_path(post.slug)] = None
        for category in resolve_categories(post, categories):
            paths[category_path(category.slug)] = None
    for index_path in INDEX_PATHS:
        paths[index_path] = None

    for path in paths:
        try:
            revalidator.revalidate_path(path, "page")
            if path in INDEX_PATHS:
                revalidator.revalidate_path(path, "layout")
        except Exception as e:
            logger.error("Failed to revalidate %s: %s", path, e)

    try:
        revalidator.revalidate_tag(SITEMAP_TAG)
    except Exception as e:
        logger.error("Failed to revalidate tag %s: %s", SITEMAP_TAG, e)

    return len(posts)


# --- Lifecycle hooks ---


def _disabled(context: Mapping[str, Any] | None) -> bool:
    return bool(context and context.get("disable_revalidate"))


def revalidate_post(
    post: Post,
    previous: Post | None,
    *,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    context: Mapping[str, Any] | None = None,
) -> Post:
    """After-change hook. Returns ``post`` unchanged."""
    if _disabled(context):
        return post

    if post.status == "published":
        revalidate_post_pages(
            post, categories=categories, revalidator=revalidator, action="publish"
        )

        if previous is not None and previous.slug and previous.slug != post.slug:
            old_path = post_path(previous.slug)
            logger.info("[publish] Slug changed, revalidating old path: %s", old_path)
            try:
                revalidator.revalidate_path(old_path)
            except Exception as e:
                logger.error("Failed to revalidate %s: %s", old_path, e)

        if previous is not None:
            current = set(post.categories)
            removed = [c for c in previous.categories if c not in current]
            for category_id in removed:
                try:
                    category = categories.get_by_id(category_id)
                    if category is not None and category.slug:
                        path = category_path(category.slug)
                        logger.info("[publish] Revalidating removed category: %s", path)
                        revalidator.revalidate_path(path)
                except Exception as e:
                    logger.error(
                        "Failed to revalidate old category %s: %s", category_id, e
                    )

    if previous is not None and previous.status == "published" and post.status != "published":
        revalidate_post_pages(
            previous, categories=categories, revalidator=revalidator, action="unpublish"
        )

    return post


def revalidate_delete(
    post: Post,
    *,
    categories: CategoryRepoPort,
    revalidator: CacheRevalidatorPort,
    context: Mapping[str, Any] | None = None,
) -> Post:
    """After-delete hook."""
    if not _disabled(context):
        revalidate_post_pages(
            post, categories=categories, revalidator=revalidator, action="delete"
        )
    return post
