"""
Search component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class RulesPort(Protocol):
    """Port for search rules configuration."""

    def get_max_variants(self) -> int:
        """Get maximum number of variants a query may expand into."""
        ...

    def get_max_query_length(self) -> int:
        """Get maximum accepted query length."""
        ...
