"""
Substitution: rewrite recognized instances into the output grid.

- operators.py: operator registry (recolor, clear, keep, extractByBoundary,
  fillBoundingBox, clearBoundingBox, shift)
- substitution.py: baseline policy and per-instance application
- legacy.py: the fixed plus→cross fallback
"""

from .legacy import legacy_pattern_matches, replace_plus_with_cross
from .operators import OPERATORS, register_operator
from .substitution import apply_substitution

__all__ = [
    "OPERATORS",
    "apply_substitution",
    "legacy_pattern_matches",
    "register_operator",
    "replace_plus_with_cross",
]
