"""
Cron-triggered publishing endpoint.

An external scheduler calls GET /publish-scheduled every few minutes so that
due drafts go live even when nobody reads them.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from gazeta.adapters.clock import SystemClock
from gazeta.adapters.revalidator import LoggingRevalidator
from gazeta.adapters.rules import RulesAdapter
from gazeta.adapters.sqlite.repos import SQLiteCategoryRepo, SQLitePostRepo
from gazeta.api.deps import (
    get_category_repo,
    get_clock,
    get_post_repo,
    get_revalidator,
    get_rules_adapter,
)
from gazeta.components.scheduler import PublishScheduledInput, run_publish_scheduled

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/publish-scheduled")
def publish_scheduled(
    store: SQLitePostRepo = Depends(get_post_repo),
    categories: SQLiteCategoryRepo = Depends(get_category_repo),
    revalidator: LoggingRevalidator = Depends(get_revalidator),
    clock: SystemClock = Depends(get_clock),
    rules: RulesAdapter = Depends(get_rules_adapter),
) -> Any:
    """Publish due drafts and refresh pages of posts that went live."""
    try:
        output = run_publish_scheduled(
            PublishScheduledInput(),
            store=store,
            categories=categories,
            revalidator=revalidator,
            clock=clock,
            rules=rules,
        )
    except Exception as e:
        logger.error("publish-scheduled run failed: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "published": output.published,
        "revalidated": output.revalidated,
        "checked": output.checked,
    }
