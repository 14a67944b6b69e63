"""
Substitution operators.

Every operator has the signature

    op(result, grid, instance, rule, background) -> None

and writes into `result` (the baseline grid) in place. `grid` is the
untouched input and is only read. Operators write the instance's cells,
except the bounding-region operators (fillBoundingBox, clearBoundingBox)
which write the whole bbox, and shift which also writes the destination.
"""

import logging
from typing import Callable, Dict

from subst_core.components import boundary_cells
from subst_core.grid import bbox_pixels, grid_shape
from subst_core.types import Grid, Pixel, RecognizedStructure, SubstitutionRule

logger = logging.getLogger(__name__)

Operator = Callable[[Grid, Grid, RecognizedStructure, SubstitutionRule, int], None]

OPERATORS: Dict[str, Operator] = {}


def register_operator(name: str):
    """Decorator: register an operator under `name` (last registration wins)."""
    def decorator(func: Operator) -> Operator:
        OPERATORS[name] = func
        return func
    return decorator


def get_operator(name: str):
    return OPERATORS.get(name)


@register_operator("keep")
def keep(result, grid, instance, rule, background):
    """Restore the instance's own values (matters on a zero baseline)."""
    for p in instance.cells:
        result[p.row][p.col] = grid[p.row][p.col]


@register_operator("recolor")
def recolor(result, grid, instance, rule, background):
    value = rule.params.get("value")
    if value is None:
        keep(result, grid, instance, rule, background)
        return
    for p in instance.cells:
        result[p.row][p.col] = value


@register_operator("clear")
def clear(result, grid, instance, rule, background):
    for p in instance.cells:
        result[p.row][p.col] = background


@register_operator("extractByBoundary")
def extract_by_boundary(result, grid, instance, rule, background):
    """
    Keep the instance's 4-boundary, clear its interior.

    The boundary takes `rule.params["value"]` when given, otherwise it keeps
    its input values.
    """
    value = rule.params.get("value")
    edge = boundary_cells(set(instance.cells))
    for p in instance.cells:
        if p in edge:
            result[p.row][p.col] = grid[p.row][p.col] if value is None else value
        else:
            result[p.row][p.col] = background


@register_operator("fillBoundingBox")
def fill_bounding_box(result, grid, instance, rule, background):
    value = rule.params.get("value", instance.value)
    for p in bbox_pixels(instance.bbox):
        result[p.row][p.col] = value


@register_operator("clearBoundingBox")
def clear_bounding_box(result, grid, instance, rule, background):
    for p in bbox_pixels(instance.bbox):
        result[p.row][p.col] = background


def _shift_fits(grid: Grid, cells, dr: int, dc: int, background: int) -> bool:
    """Every shifted cell is in bounds and lands on background or on itself."""
    H, W = grid_shape(grid)
    for p in cells:
        q = Pixel(p.row + dr, p.col + dc)
        if not (0 <= q.row < H and 0 <= q.col < W):
            return False
        if q not in cells and grid[q.row][q.col] != background:
            return False
    return True


@register_operator("shift")
def shift(result, grid, instance, rule, background):
    """
    Translate the instance as a rigid unit.

    params:
    - direction: [dr, dc] unit step (default down)
    - steps: fixed number of steps; cells pushed off the grid are dropped
    - until_blocked: slide while the whole instance still fits on
      background cells of the input grid
    """
    H, W = grid_shape(grid)
    dr, dc = rule.params.get("direction", (1, 0))
    cells = instance.cells

    if rule.params.get("until_blocked"):
        steps = 0
        while steps < H + W and _shift_fits(grid, cells, dr * (steps + 1), dc * (steps + 1), background):
            steps += 1
    else:
        steps = int(rule.params.get("steps", 1))

    if steps == 0:
        keep(result, grid, instance, rule, background)
        return

    for p in cells:
        result[p.row][p.col] = background
    for p in cells:
        r, c = p.row + dr * steps, p.col + dc * steps
        if 0 <= r < H and 0 <= c < W:
            result[r][c] = grid[p.row][p.col]
