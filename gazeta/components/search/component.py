"""
Search component - Romanian diacritic-aware query expansion.

Invariants:
- The original query is always part of its own variant set
- Expansion is case-insensitive (variants other than the original are lowercase)
- The empty query expands to nothing
- Queries over the configured variant cap are rejected, not truncated
"""

from __future__ import annotations

from ._impl import DEFAULT_CONFIG, SearchConfig, count_variants, expand, normalize
from .models import (
    ExpandOutput,
    ExpandQueryInput,
    NormalizeInput,
    NormalizeOutput,
    SearchValidationError,
)
from .ports import RulesPort


def _build_config(rules: RulesPort | None) -> SearchConfig:
    """Build search config from rules port."""
    if rules is None:
        return DEFAULT_CONFIG

    return SearchConfig(
        max_variants=rules.get_max_variants(),
        max_query_length=rules.get_max_query_length(),
    )


def _validate_query(query: str, config: SearchConfig) -> list[SearchValidationError]:
    errors: list[SearchValidationError] = []

    if len(query) > config.max_query_length:
        errors.append(
            SearchValidationError(
                code="query_too_long",
                message=(
                    f"Query is {len(query)} characters, "
                    f"maximum is {config.max_query_length}"
                ),
            )
        )

    count = count_variants(query)
    if count > config.max_variants:
        errors.append(
            SearchValidationError(
                code="too_many_variants",
                message=f"Query expands to {count} variants, maximum is {config.max_variants}",
            )
        )

    return errors


# --- Component Entry Points ---


def run_expand(
    inp: ExpandQueryInput,
    *,
    rules: RulesPort | None = None,
) -> ExpandOutput:
    """
    Expand a query into its diacritic variants.

    Args:
        inp: Input containing the raw query.
        rules: Optional rules port for limits.

    Returns:
        ExpandOutput with sorted variants, or errors if the query is over
        the configured limits.
    """
    config = _build_config(rules)
    errors = _validate_query(inp.query, config)

    if errors:
        return ExpandOutput(variants=(), errors=errors, success=False)

    return ExpandOutput(variants=tuple(sorted(expand(inp.query))))


def run_normalize(inp: NormalizeInput) -> NormalizeOutput:
    """Strip diacritics and lowercase."""
    return NormalizeOutput(text=normalize(inp.text))


def run(
    inp: ExpandQueryInput | NormalizeInput,
    *,
    rules: RulesPort | None = None,
) -> ExpandOutput | NormalizeOutput:
    """
    Main entry point for the search component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, ExpandQueryInput):
        return run_expand(inp, rules=rules)
    elif isinstance(inp, NormalizeInput):
        return run_normalize(inp)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
