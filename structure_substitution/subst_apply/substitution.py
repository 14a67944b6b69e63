"""
Apply a substitution rule to recognized instances.

Baseline: a copy of the input when preserving non-matching cells,
otherwise an all-background grid of the same shape. Instances are
rewritten one by one in recognition order, so overlapping write regions
resolve last-write-wins. An unregistered operator leaves the instance's
cells at their baseline values.
"""

import logging
from typing import Iterable

from subst_core.grid import copy_grid, zeros_like
from subst_core.types import Grid, RecognizedStructure, SubstitutionRule

from .operators import get_operator

logger = logging.getLogger(__name__)


def apply_substitution(
    grid: Grid,
    instances: Iterable[RecognizedStructure],
    rule: SubstitutionRule,
    preserve_non_matching: bool = True,
    background: int = 0,
) -> Grid:
    """
    Rewrite every instance with the rule's operator.

    Args:
        grid: Input grid (never mutated)
        instances: Recognized structures, in recognition order
        rule: Substitution rule naming the operator
        preserve_non_matching: copy baseline (True) or cleared baseline
        background: value used for cleared cells

    Returns:
        New grid with the same shape as `grid`
    """
    result = copy_grid(grid) if preserve_non_matching else zeros_like(grid, background)

    operator = get_operator(rule.operator)
    if operator is None:
        logger.warning(f"Unknown substitution operator '{rule.operator}'; instances left at baseline")
        return result

    count = 0
    for instance in instances:
        operator(result, grid, instance, rule, background)
        count += 1

    logger.info(f"Applied '{rule.operator}' to {count} instance(s)")
    return result
