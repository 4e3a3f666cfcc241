from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
PostStatus = Literal["draft", "published"]
TaskStatus = Literal["queued", "running", "succeeded", "failed"]
RevalidateAction = Literal["publish", "unpublish", "delete"]


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are stored as UTC; make them comparable with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# --- Authors & Categories ---

class Author(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str


class AuthorRef(BaseModel):
    id: UUID
    name: str


class Category(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str


# --- Posts ---

class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str = ""
    slug_lock: bool = True
    status: PostStatus = "draft"

    # Scheduled publish time; a draft with a past publish_at is due.
    publish_at: datetime | None = None

    categories: list[UUID] = Field(default_factory=list)
    authors: list[UUID] = Field(default_factory=list)
    # Filled by the after-read hook, never persisted
    populated_authors: list[AuthorRef] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Deferred work ---

class RevalidationTask(BaseModel):
    """Deferred cache revalidation for one post, run at or after run_at."""

    id: UUID = Field(default_factory=uuid4)
    task_slug: str = "revalidate_cache"
    run_at: datetime
    target_id: UUID
    target_slug: str
    status: TaskStatus = "queued"
    attempts: int = 0
    error_message: str | None = None
    claimed_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
