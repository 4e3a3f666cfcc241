"""
Tests for cache revalidation of post pages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from gazeta.adapters.revalidator import LoggingRevalidator
from gazeta.components.revalidation import (
    SITEMAP_TAG,
    post_paths,
    revalidate_delete,
    revalidate_post,
    revalidate_post_pages,
)
from gazeta.domain.entities import Category, Post


@dataclass
class MockCategoryRepo:
    categories: dict[UUID, Category] = field(default_factory=dict)
    broken: set[UUID] = field(default_factory=set)

    def get_by_id(self, category_id: UUID) -> Category | None:
        if category_id in self.broken:
            raise RuntimeError("connection reset")
        return self.categories.get(category_id)

    def save(self, category: Category) -> Category:
        self.categories[category.id] = category
        return category


@dataclass
class FlakyRevalidator(LoggingRevalidator):
    """Fails for one path, records the rest."""

    failing_path: str = "/"

    def revalidate_path(self, path, scope=None) -> None:  # type: ignore[no-untyped-def]
        if path == self.failing_path:
            raise RuntimeError("revalidation endpoint down")
        super().revalidate_path(path, scope)


@pytest.fixture
def categories() -> MockCategoryRepo:
    return MockCategoryRepo()


@pytest.fixture
def revalidator() -> LoggingRevalidator:
    return LoggingRevalidator()


@pytest.fixture
def sport(categories: MockCategoryRepo) -> Category:
    return categories.save(Category(title="Sport", slug="sport"))


@pytest.fixture
def cultura(categories: MockCategoryRepo) -> Category:
    return categories.save(Category(title="Cultură", slug="cultura"))


def published(**kwargs) -> Post:  # type: ignore[no-untyped-def]
    kwargs.setdefault("title", "Meci amânat")
    kwargs.setdefault("slug", "meci-amanat")
    return Post(status="published", **kwargs)


class TestPostPaths:
    def test_order_and_contents(self, categories: MockCategoryRepo, sport: Category) -> None:
        post = published(categories=[sport.id])
        assert post_paths(post, categories) == [
            "/posts/meci-amanat",
            "/",
            "/posts",
            "/categories",
            "/categories/sport",
        ]

    def test_no_slug_skips_post_path(self, categories: MockCategoryRepo) -> None:
        post = published(slug="")
        assert post_paths(post, categories) == ["/", "/posts", "/categories"]

    def test_unresolvable_categories_skipped(
        self, categories: MockCategoryRepo, sport: Category
    ) -> None:
        broken = uuid4()
        categories.broken.add(broken)
        post = published(categories=[broken, uuid4(), sport.id])

        assert post_paths(post, categories)[-1] == "/categories/sport"
        assert len(post_paths(post, categories)) == 5


class TestRevalidatePostPages:
    def test_scopes(self, categories: MockCategoryRepo, revalidator: LoggingRevalidator) -> None:
        report = revalidate_post_pages(
            published(), categories=categories, revalidator=revalidator, action="publish"
        )

        assert report.success
        assert ("/posts/meci-amanat", None) in revalidator.paths
        assert ("/posts/meci-amanat", "layout") in revalidator.paths
        assert ("/posts", "page") in revalidator.paths
        assert ("/categories", "page") not in revalidator.paths
        assert revalidator.tags == [SITEMAP_TAG]

    def test_failing_path_does_not_stop_others(self, categories: MockCategoryRepo) -> None:
        revalidator = FlakyRevalidator(failing_path="/")

        report = revalidate_post_pages(
            published(), categories=categories, revalidator=revalidator, action="publish"
        )

        assert not report.success
        assert report.failed == ["/"]
        assert "/categories" in report.revalidated
        assert revalidator.tags == [SITEMAP_TAG]


class TestRevalidatePost:
    def test_published_revalidates_pages(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        post = published()
        returned = revalidate_post(
            post, None, categories=categories, revalidator=revalidator
        )

        assert returned is post
        assert "/posts/meci-amanat" in revalidator.revalidated_paths

    def test_disabled_by_context(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        revalidate_post(
            published(),
            None,
            categories=categories,
            revalidator=revalidator,
            context={"disable_revalidate": True},
        )
        assert revalidator.paths == []
        assert revalidator.tags == []

    def test_slug_change_revalidates_old_path(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        previous = published()
        post = previous.model_copy(update={"slug": "meci-reprogramat"})

        revalidate_post(post, previous, categories=categories, revalidator=revalidator)

        assert "/posts/meci-amanat" in revalidator.revalidated_paths
        assert "/posts/meci-reprogramat" in revalidator.revalidated_paths

    def test_removed_category_revalidated(
        self,
        categories: MockCategoryRepo,
        revalidator: LoggingRevalidator,
        sport: Category,
        cultura: Category,
    ) -> None:
        previous = published(categories=[sport.id, cultura.id])
        post = previous.model_copy(update={"categories": [sport.id]})

        revalidate_post(post, previous, categories=categories, revalidator=revalidator)

        assert "/categories/cultura" in revalidator.revalidated_paths
        assert "/categories/sport" in revalidator.revalidated_paths

    def test_unpublish_revalidates_previous_pages(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        previous = published()
        post = previous.model_copy(update={"status": "draft"})

        revalidate_post(post, previous, categories=categories, revalidator=revalidator)

        assert "/posts/meci-amanat" in revalidator.revalidated_paths
        assert revalidator.tags == [SITEMAP_TAG]

    def test_draft_save_touches_nothing(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        post = Post(title="Ciornă", slug="ciorna")

        revalidate_post(post, None, categories=categories, revalidator=revalidator)

        assert revalidator.paths == []


class TestRevalidateDelete:
    def test_delete_revalidates(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        revalidate_delete(published(), categories=categories, revalidator=revalidator)
        assert "/posts/meci-amanat" in revalidator.revalidated_paths

    def test_delete_disabled(
        self, categories: MockCategoryRepo, revalidator: LoggingRevalidator
    ) -> None:
        revalidate_delete(
            published(),
            categories=categories,
            revalidator=revalidator,
            context={"disable_revalidate": True},
        )
        assert revalidator.paths == []
