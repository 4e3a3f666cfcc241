"""
Posts component - the document pipeline that runs the lifecycle hooks.
"""

from ._impl import PostConfig, PostService, populate_authors

__all__ = [
    "PostConfig",
    "PostService",
    "populate_authors",
]
