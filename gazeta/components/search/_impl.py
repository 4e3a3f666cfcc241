"""
Romanian diacritic handling for search and slugs.

Key behaviors:
- expand() enumerates every plain/diacritic spelling of a query so that a
  plain-text search backend matches documents whether or not diacritics were
  typed ("scoala" finds "școală").
- normalize() is the opposite reduction: one base letter per character,
  used for cheap insensitive comparison.
- Both comma-below (ș ț) and legacy cedilla (ş ţ) code points are handled;
  older imported articles use the cedilla forms.

Growth: expand() yields prod(|class|) strings. It does not cap anything
itself; callers facing user input go through expand_bounded().
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from itertools import product
from types import MappingProxyType

from gazeta.core.errors import VariantLimitExceeded

# --- Substitution classes ---

SUBSTITUTION_CLASSES: tuple[tuple[str, ...], ...] = (
    ("a", "ă", "â"),
    ("i", "î"),
    ("s", "ș", "ş"),
    ("t", "ț", "ţ"),
)


def _build_substitutions(
    classes: tuple[tuple[str, ...], ...],
) -> Mapping[str, tuple[str, ...]]:
    table: dict[str, tuple[str, ...]] = {}
    for members in classes:
        for letter in members:
            table[letter] = members
    return MappingProxyType(table)


# Every member of a class maps to the whole class
SUBSTITUTIONS: Mapping[str, tuple[str, ...]] = _build_substitutions(SUBSTITUTION_CLASSES)

_BASE_LETTERS = str.maketrans(
    {
        "ă": "a",
        "â": "a",
        "î": "i",
        "ș": "s",
        "ş": "s",
        "ț": "t",
        "ţ": "t",
    }
)

_SLUG_LETTERS = str.maketrans(
    {
        "ă": "a",
        "â": "a",
        "î": "i",
        "ș": "s",
        "ş": "s",
        "ț": "t",
        "ţ": "t",
        "Ă": "A",
        "Â": "A",
        "Î": "I",
        "Ș": "S",
        "Ş": "S",
        "Ț": "T",
        "Ţ": "T",
    }
)

_SLUG_DISALLOWED = re.compile(r"[^\w-]+", re.ASCII)


# --- Configuration ---


@dataclass(frozen=True)
class SearchConfig:
    """Search limits from rules."""

    max_variants: int = 4096
    max_query_length: int = 64


DEFAULT_CONFIG = SearchConfig()


# --- Expansion ---


def expand(query: str) -> set[str]:
    """
    Every diacritic spelling of ``query``.

    The input is lowercased before expansion; the original string is added
    verbatim as well, so ``query in expand(query)`` always holds for a
    non-empty query. Characters outside the substitution classes pass
    through unchanged.
    """
    if not query:
        return set()

    choices = [SUBSTITUTIONS.get(ch, (ch,)) for ch in query.lower()]
    variants = {"".join(combo) for combo in product(*choices)}
    variants.add(query)
    return variants


def count_variants(query: str) -> int:
    """Number of generated spellings (excluding the verbatim original)."""
    if not query:
        return 0
    return math.prod(len(SUBSTITUTIONS.get(ch, (ch,))) for ch in query.lower())


def expand_bounded(query: str, max_variants: int) -> set[str]:
    """
    expand() that refuses to enumerate more than ``max_variants`` spellings.

    Raises:
        VariantLimitExceeded: if the product of class sizes is over the cap.
    """
    count = count_variants(query)
    if count > max_variants:
        raise VariantLimitExceeded(query, count, max_variants)
    return expand(query)


# --- Normalization ---


def normalize(text: str) -> str:
    """Lowercase and strip Romanian diacritics: ``normalize("ăşâțî") == "asait"``."""
    if not text:
        return ""
    return text.lower().translate(_BASE_LETTERS)


def matches(text: str, query: str) -> bool:
    """Case and diacritic insensitive containment."""
    return normalize(query) in normalize(text)


# --- Slugs ---


def format_slug(value: str) -> str:
    """
    URL slug for a title.

    Diacritics become base letters, spaces become dashes, anything else that
    is not an ASCII word character or dash is dropped.
    """
    normalized = value.translate(_SLUG_LETTERS)
    return _SLUG_DISALLOWED.sub("", normalized.replace(" ", "-")).lower()


def resolve_slug(
    value: object,
    *,
    fallback: object,
    slug_lock: bool,
    operation: str,
    has_slug: bool,
) -> object:
    """
    Slug field hook.

    Locked slugs always follow the fallback field (the title). Unlocked
    slugs keep an explicit value, formatted; without one they are derived
    from the fallback on create, or when the document has no slug yet.
    """
    fallback_ok = isinstance(fallback, str) and fallback.strip() != ""

    if slug_lock:
        return format_slug(fallback) if fallback_ok else ""  # type: ignore[arg-type]

    if isinstance(value, str):
        return format_slug(value)

    if (operation == "create" or not has_slug) and fallback_ok:
        return format_slug(fallback)  # type: ignore[arg-type]

    return value
