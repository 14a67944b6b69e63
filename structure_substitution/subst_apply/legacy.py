"""
Fixed plus→cross rewrite, kept as a named special case.

Input structure: 3×3 block of 1s around a 0 center:
    1 1 1
    1 0 1
    1 1 1

Output structure: cross of 2s with the corners cleared:
    0 2 0
    2 2 2
    0 2 0

Only consulted after the generic pipeline recognized nothing.
"""

from subst_core.grid import grid_shape
from subst_core.types import Grid, description_text


def legacy_pattern_matches(input_structure, output_structure) -> bool:
    """
    Do the raw descriptions read like the plus→cross case?

    Input must mention a 3-block, 1s, "plus" or "cardinal"; output must
    mention a cross, or 2s at the cardinal points/center.
    """
    inp = description_text(input_structure).lower()
    out = description_text(output_structure).lower()
    if not inp or not out:
        return False

    input_3x3_block = (
        ("3" in inp and "block" in inp)
        or ("3" in inp and "1s" in inp)
        or "plus" in inp
        or "cardinal" in inp
    )
    output_cross_of_2s = (
        "cross" in out
        or ("2" in out and ("cardinal" in out or "center" in out))
    )
    return input_3x3_block and output_cross_of_2s


def replace_plus_with_cross(grid: Grid, result: Grid) -> Grid:
    """
    Rewrite every 3×3 plus block of `grid` into a cross in `result`.

    Centers are scanned row-major over interior cells; all nine cells of a
    match are marked consumed so later centers cannot re-trigger on them.

    Args:
        grid: Input grid (read only)
        result: Baseline grid, written in place

    Returns:
        `result`
    """
    H, W = grid_shape(grid)
    processed = set()

    for i in range(1, H - 1):
        for j in range(1, W - 1):
            if (i, j) in processed:
                continue

            is_plus_block = grid[i][j] == 0 and all(
                grid[i + di][j + dj] == 1
                for di in (-1, 0, 1)
                for dj in (-1, 0, 1)
                if (di, dj) != (0, 0)
            )
            if not is_plus_block:
                continue

            for di in (-1, 0, 1):
                for dj in (-1, 0, 1):
                    result[i + di][j + dj] = 0
                    processed.add((i + di, j + dj))

            # Cross of 2s: up, left, center, right, down
            for di, dj in ((-1, 0), (0, -1), (0, 0), (0, 1), (1, 0)):
                result[i + di][j + dj] = 2

    return result
