"""
Dev cache revalidator.

The frontend cache lives outside this process; locally we only record and
log what would be invalidated. Recorded paths back test assertions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gazeta.ports.cache import PathScope

logger = logging.getLogger(__name__)


@dataclass
class LoggingRevalidator:
    """Records revalidated paths and tags in memory."""

    log_level: int = logging.INFO
    paths: list[tuple[str, PathScope | None]] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def revalidate_path(self, path: str, scope: PathScope | None = None) -> None:
        self.paths.append((path, scope))
        logger.log(self.log_level, "Revalidate path %s (scope=%s)", path, scope or "default")

    def revalidate_tag(self, tag: str) -> None:
        self.tags.append(tag)
        logger.log(self.log_level, "Revalidate tag %s", tag)

    @property
    def revalidated_paths(self) -> set[str]:
        return {path for path, _ in self.paths}

    def clear(self) -> None:
        self.paths.clear()
        self.tags.clear()
