"""
Public read endpoints: single post and diacritic-insensitive search.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from gazeta.adapters.rules import RulesAdapter
from gazeta.api.deps import get_post_service, get_rules_adapter
from gazeta.components.posts import PostService
from gazeta.components.search import ExpandQueryInput, run_expand
from gazeta.core.errors import VariantLimitExceeded
from gazeta.domain.entities import Post

router = APIRouter()


# --- Response Models ---


class AuthorResponse(BaseModel):
    id: UUID
    name: str


class PostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    status: str
    publish_at: datetime | None = None
    categories: list[UUID]
    authors: list[AuthorResponse]


class SearchResponse(BaseModel):
    query: str
    variants: list[str]
    results: list[PostResponse]


def post_to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        slug=post.slug,
        status=post.status,
        publish_at=post.publish_at,
        categories=post.categories,
        authors=[AuthorResponse(id=a.id, name=a.name) for a in post.populated_authors],
    )


# --- Routes ---


@router.get("/posts/{slug}", response_model=PostResponse)
def get_post(slug: str, service: PostService = Depends(get_post_service)) -> PostResponse:
    post = service.get_by_slug(slug)
    # Scheduled drafts stay hidden until the read hook has published them
    if post is None or post.status != "published":
        raise HTTPException(status_code=404, detail="Post not found")
    return post_to_response(post)


@router.get("/search", response_model=SearchResponse)
def search(
    q: str = Query(..., min_length=1),
    service: PostService = Depends(get_post_service),
    rules: RulesAdapter = Depends(get_rules_adapter),
) -> SearchResponse:
    query = q.strip()
    expanded = run_expand(ExpandQueryInput(query=query), rules=rules)
    if not expanded.success:
        detail = [{"code": e.code, "message": e.message} for e in expanded.errors]
        raise HTTPException(status_code=400, detail=detail)

    try:
        posts = service.search(query)
    except VariantLimitExceeded as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return SearchResponse(
        query=query,
        variants=list(expanded.variants),
        results=[post_to_response(p) for p in posts],
    )
