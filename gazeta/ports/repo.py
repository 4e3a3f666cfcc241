from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from gazeta.domain.entities import Author, Category, Post


class PostRepoPort(Protocol):
    def save(self, post: Post) -> Post:
        ...

    def get_by_id(self, post_id: UUID) -> Post | None:
        ...

    def get_by_slug(self, slug: str) -> Post | None:
        ...

    def find(
        self,
        *,
        status: str | None = None,
        publish_after: datetime | None = None,
        publish_until: datetime | None = None,
        limit: int = 20,
    ) -> list[Post]:
        """Posts matching all given conditions, publish_at in (after, until]."""
        ...

    def update_by_id(self, post_id: UUID, data: dict[str, Any]) -> Post:
        """Apply a partial update. Raises StoreError if the post is missing."""
        ...

    def search_titles(self, variants: list[str], limit: int = 20) -> list[Post]:
        """Published posts whose title contains any of the variants."""
        ...

    def delete(self, post_id: UUID) -> None:
        ...


class CategoryRepoPort(Protocol):
    def get_by_id(self, category_id: UUID) -> Category | None:
        ...

    def save(self, category: Category) -> Category:
        ...


class AuthorRepoPort(Protocol):
    def list_by_ids(self, author_ids: list[UUID]) -> list[Author]:
        ...

    def save(self, author: Author) -> Author:
        ...
