"""
Tests for the public read API: post by slug and diacritic-insensitive search.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gazeta.adapters.clock import FixedClock
from gazeta.adapters.revalidator import LoggingRevalidator
from gazeta.adapters.sqlite.repos import (
    SQLiteAuthorRepo,
    SQLiteCategoryRepo,
    SQLitePostRepo,
    SQLiteTaskQueue,
)
from gazeta.api.deps import get_post_service, get_rules, get_settings
from gazeta.api.main import app as main_app
from gazeta.api.routes.public import router
from gazeta.components.posts import PostService
from gazeta.domain.entities import Author, Post
from gazeta.rules.models import Rules

NOW = datetime(2026, 3, 14, 9, 30, 0, tzinfo=UTC)


@pytest.fixture
def posts(db_path: str) -> SQLitePostRepo:
    return SQLitePostRepo(db_path)


@pytest.fixture
def authors(db_path: str) -> SQLiteAuthorRepo:
    return SQLiteAuthorRepo(db_path)


@pytest.fixture
def service(db_path: str, posts: SQLitePostRepo, authors: SQLiteAuthorRepo) -> PostService:
    return PostService(
        store=posts,
        categories=SQLiteCategoryRepo(db_path),
        authors=authors,
        queue=SQLiteTaskQueue(db_path),
        revalidator=LoggingRevalidator(),
        clock=FixedClock(NOW),
    )


@pytest.fixture
def rules() -> Rules:
    return Rules.model_validate({"search": {"max_variants": 100, "max_query_length": 20}})


@pytest.fixture
def client(service: PostService, rules: Rules) -> TestClient:
    app = FastAPI()
    app.include_router(router, prefix="/api")

    app.dependency_overrides[get_post_service] = lambda: service
    app.dependency_overrides[get_rules] = lambda: rules

    return TestClient(app)


class TestGetPost:
    def test_published_post(
        self, client: TestClient, posts: SQLitePostRepo, authors: SQLiteAuthorRepo
    ) -> None:
        ana = authors.save(Author(name="Ana Popescu"))
        posts.save(
            Post(
                title="Ședința de guvern",
                slug="sedinta-de-guvern",
                status="published",
                publish_at=NOW - timedelta(days=1),
                authors=[ana.id],
            )
        )

        response = client.get("/api/posts/sedinta-de-guvern")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Ședința de guvern"
        assert data["status"] == "published"
        assert data["authors"] == [{"id": str(ana.id), "name": "Ana Popescu"}]

    def test_due_draft_is_published_on_read(
        self, client: TestClient, posts: SQLitePostRepo
    ) -> None:
        draft = posts.save(
            Post(title="Breaking", slug="breaking", publish_at=NOW - timedelta(seconds=1))
        )

        response = client.get("/api/posts/breaking")

        assert response.status_code == 200
        assert response.json()["status"] == "published"
        assert posts.get_by_id(draft.id).status == "published"

    def test_future_draft_is_hidden(self, client: TestClient, posts: SQLitePostRepo) -> None:
        posts.save(Post(title="Embargo", slug="embargo", publish_at=NOW + timedelta(hours=1)))

        response = client.get("/api/posts/embargo")

        assert response.status_code == 404
        assert posts.get_by_slug("embargo").status == "draft"

    def test_missing(self, client: TestClient) -> None:
        assert client.get("/api/posts/nu-exista").status_code == 404


class TestSearch:
    def test_plain_query_matches_diacritics(
        self, client: TestClient, posts: SQLitePostRepo
    ) -> None:
        posts.save(Post(title="Școala începe", slug="scoala-incepe", status="published"))
        posts.save(Post(title="Vremea", slug="vremea", status="published"))

        response = client.get("/api/search", params={"q": "scoala"})

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "scoala"
        assert "școala" in data["variants"]
        assert len(data["variants"]) == 27
        assert [r["slug"] for r in data["results"]] == ["scoala-incepe"]

    def test_too_many_variants(self, client: TestClient) -> None:
        response = client.get("/api/search", params={"q": "astazi"})

        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "too_many_variants"

    def test_query_too_long(self, client: TestClient) -> None:
        response = client.get("/api/search", params={"q": "x" * 30})

        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "query_too_long"

    def test_missing_query(self, client: TestClient) -> None:
        assert client.get("/api/search").status_code == 422


def test_health() -> None:
    response = TestClient(main_app).get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_startup_migrates_and_runs_dev_jobs(tmp_path, monkeypatch) -> None:
    rules_path = Path(__file__).resolve().parents[2] / "rules.yaml"
    monkeypatch.setenv("GAZETA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GAZETA_RULES_PATH", str(rules_path))
    monkeypatch.setenv("GAZETA_DEV_JOBS", "1")
    get_settings.cache_clear()
    try:
        with TestClient(main_app) as client:
            assert client.get("/health").status_code == 200
            assert (tmp_path / "data" / "gazeta.db").exists()
            assert client.get("/api/posts/inexistent").status_code == 404
    finally:
        get_settings.cache_clear()
