import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from gazeta.adapters.clock import SystemClock
from gazeta.adapters.revalidator import LoggingRevalidator
from gazeta.adapters.rules import RulesAdapter
from gazeta.adapters.sqlite.repos import (
    SQLiteAuthorRepo,
    SQLiteCategoryRepo,
    SQLitePostRepo,
    SQLiteTaskQueue,
)
from gazeta.components.posts import PostConfig, PostService
from gazeta.rules.loader import load_rules
from gazeta.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("GAZETA_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "gazeta.db")
        self.rules_path = Path(
            os.environ.get("GAZETA_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        # Run the in-process revalidation task runner (local development)
        self.run_dev_jobs = os.environ.get("GAZETA_DEV_JOBS", "0") == "1"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_rules_adapter(rules: Rules = Depends(get_rules)) -> RulesAdapter:
    return RulesAdapter(rules)


# --- Repos ---
def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


def get_category_repo(settings: Settings = Depends(get_settings)) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path)


def get_author_repo(settings: Settings = Depends(get_settings)) -> SQLiteAuthorRepo:
    return SQLiteAuthorRepo(settings.db_path)


def get_task_queue(settings: Settings = Depends(get_settings)) -> SQLiteTaskQueue:
    return SQLiteTaskQueue(settings.db_path)


# --- Adapters ---
@lru_cache
def get_revalidator() -> LoggingRevalidator:
    return LoggingRevalidator()


def get_clock() -> SystemClock:
    return SystemClock()


# --- Component Services ---
def get_post_service(
    store: SQLitePostRepo = Depends(get_post_repo),
    categories: SQLiteCategoryRepo = Depends(get_category_repo),
    authors: SQLiteAuthorRepo = Depends(get_author_repo),
    queue: SQLiteTaskQueue = Depends(get_task_queue),
    revalidator: LoggingRevalidator = Depends(get_revalidator),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> PostService:
    """Get the post pipeline with its hooks wired to the SQLite adapters."""
    return PostService(
        store=store,
        categories=categories,
        authors=authors,
        queue=queue,
        revalidator=revalidator,
        clock=clock,
        config=PostConfig(
            revalidation_delay_seconds=rules.scheduling.revalidation_delay_seconds,
            max_variants=rules.search.max_variants,
        ),
    )
