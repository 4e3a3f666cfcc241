"""
Revalidation component - cache invalidation for pages that show a post.
"""

from ._impl import (
    INDEX_PATHS,
    SITEMAP_TAG,
    RevalidationReport,
    category_path,
    post_path,
    post_paths,
    resolve_categories,
    revalidate_active_posts,
    revalidate_delete,
    revalidate_post,
    revalidate_post_pages,
)

__all__ = [
    "INDEX_PATHS",
    "SITEMAP_TAG",
    "RevalidationReport",
    "category_path",
    "post_path",
    "post_paths",
    "resolve_categories",
    "revalidate_active_posts",
    "revalidate_delete",
    "revalidate_post",
    "revalidate_post_pages",
]
