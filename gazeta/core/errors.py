"""
Error types shared across gazeta components.

Hierarchy:
    Exception
    +-- GazetaError
        +-- StoreError            (document store read/write failed)
        +-- QueueError            (task could not be enqueued)
        +-- VariantLimitExceeded  (search expansion over the configured cap)

Lifecycle hooks never let store or queue errors escape into the enclosing
request: they are caught at the hook boundary and logged. VariantLimitExceeded
is raised to search callers, which answer with a client error.
"""

from __future__ import annotations

from uuid import UUID


class GazetaError(Exception):
    """Base exception for gazeta errors."""

    pass


class StoreError(GazetaError):
    """Document store operation failed."""

    def __init__(self, message: str, doc_id: UUID | None = None) -> None:
        self.doc_id = doc_id
        super().__init__(message if doc_id is None else f"{message}: {doc_id}")


class QueueError(GazetaError):
    """Task queue rejected or failed to persist a task."""

    pass


class VariantLimitExceeded(GazetaError):
    """Query would expand into more variants than allowed."""

    def __init__(self, query: str, count: int, limit: int) -> None:
        self.query = query
        self.count = count
        self.limit = limit
        super().__init__(
            f"Query expands to {count} variants (limit {limit}): {query!r}"
        )
