"""
Search component - Romanian diacritic expansion, normalization and slugs.
"""

from ._impl import (
    SUBSTITUTION_CLASSES,
    SUBSTITUTIONS,
    SearchConfig,
    count_variants,
    expand,
    expand_bounded,
    format_slug,
    matches,
    normalize,
    resolve_slug,
)
from .component import run, run_expand, run_normalize
from .models import (
    ExpandOutput,
    ExpandQueryInput,
    NormalizeInput,
    NormalizeOutput,
    SearchValidationError,
)
from .ports import RulesPort

__all__ = [
    # Entry points
    "run",
    "run_expand",
    "run_normalize",
    # Input models
    "ExpandQueryInput",
    "NormalizeInput",
    # Output models
    "ExpandOutput",
    "NormalizeOutput",
    "SearchValidationError",
    # Ports
    "RulesPort",
    # Pure functions
    "SUBSTITUTION_CLASSES",
    "SUBSTITUTIONS",
    "SearchConfig",
    "count_variants",
    "expand",
    "expand_bounded",
    "format_slug",
    "matches",
    "normalize",
    "resolve_slug",
]
