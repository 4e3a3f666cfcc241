"""
Scheduler component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from gazeta.ports.cache import CacheRevalidatorPort
from gazeta.ports.clock import ClockPort
from gazeta.ports.queue import TaskQueuePort
from gazeta.ports.repo import CategoryRepoPort, PostRepoPort


class RulesPort(Protocol):
    """Port for scheduling rules configuration."""

    def get_revalidation_delay_seconds(self) -> int:
        """Get delay between publish time and cache revalidation."""
        ...

    def get_publish_batch_limit(self) -> int:
        """Get max drafts published per cron run."""
        ...

    def get_active_batch_limit(self) -> int:
        """Get max recently-live posts revalidated per cron run."""
        ...

    def get_lookback_hours(self) -> int:
        """Get window for posts considered recently live."""
        ...


__all__ = [
    "CacheRevalidatorPort",
    "CategoryRepoPort",
    "ClockPort",
    "PostRepoPort",
    "RulesPort",
    "TaskQueuePort",
]
