"""
Search component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Validation Error ---


@dataclass(frozen=True)
class SearchValidationError:
    """Search validation error."""

    code: str
    message: str


# --- Input Models ---


@dataclass(frozen=True)
class ExpandQueryInput:
    """Input for expanding a user query into diacritic variants."""

    query: str


@dataclass(frozen=True)
class NormalizeInput:
    """Input for stripping diacritics from text."""

    text: str


# --- Output Models ---


@dataclass(frozen=True)
class ExpandOutput:
    """Output for expand operation. Variants are sorted for stable display."""

    variants: tuple[str, ...]
    errors: list[SearchValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class NormalizeOutput:
    """Output for normalize operation."""

    text: str
    errors: list[SearchValidationError] = field(default_factory=list)
    success: bool = True
