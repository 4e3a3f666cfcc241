import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gazeta.adapters.dev_jobs import (
    DevTaskScheduler,
    create_dev_scheduler,
    create_dev_task_runner,
)
from gazeta.adapters.sqlite.migrator import SQLiteMigrator
from gazeta.adapters.sqlite.repos import SQLiteCategoryRepo, SQLitePostRepo, SQLiteTaskQueue
from gazeta.api.deps import Settings, get_revalidator, get_settings
from gazeta.rules.loader import load_rules
from gazeta.rules.models import Rules

logger = logging.getLogger(__name__)


def _start_dev_jobs(settings: Settings, rules: Rules) -> DevTaskScheduler:
    runner = create_dev_task_runner(
        SQLiteTaskQueue(settings.db_path),
        store=SQLitePostRepo(settings.db_path),
        categories=SQLiteCategoryRepo(settings.db_path),
        revalidator=get_revalidator(),
        max_attempts=rules.jobs.max_attempts,
        retry_delay_seconds=rules.jobs.retry_delay_seconds,
    )
    scheduler = create_dev_scheduler(runner, rules.jobs.poll_interval_seconds)
    scheduler.start()
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and migrate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path).run_migrations()
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    scheduler = _start_dev_jobs(settings, rules) if settings.run_dev_jobs else None

    yield

    if scheduler is not None:
        scheduler.stop()


app = FastAPI(
    title="Gazeta API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from gazeta.api.routes import cron, public  # noqa: E402

app.include_router(public.router, prefix="/api", tags=["Public"])
app.include_router(cron.router, prefix="/api", tags=["Cron"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
