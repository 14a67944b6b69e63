"""
Grid helpers: validation, copies, bounds and neighborhoods.

All helpers return newly allocated grids; the caller's grid is never
mutated.
"""

from typing import Iterable, List

from .types import BBox, Grid, Pixel

# Neighbor offsets in fixed order (for determinism)
OFFSETS_4 = [(-1, 0), (0, 1), (1, 0), (0, -1)]  # up, right, down, left
OFFSETS_8 = [(-1, 0), (-1, 1), (0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1)]  # clockwise from N


def validate_grid(grid: Grid) -> None:
    """
    Check the grid invariants.

    Raises:
        ValueError: if the grid is empty, ragged, or holds negative or
            non-integer cells
    """
    if not grid or not grid[0]:
        raise ValueError("Grid must be at least 1x1")

    W = len(grid[0])
    for r, row in enumerate(grid):
        if len(row) != W:
            raise ValueError(f"Grid row {r} has length {len(row)}, expected {W}")
        for c, value in enumerate(row):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Cell ({r},{c}) must be a non-negative int, got {value!r}")


def grid_shape(grid: Grid) -> tuple[int, int]:
    """Return (H, W); (0, 0) for an empty grid."""
    H = len(grid)
    W = len(grid[0]) if H else 0
    return H, W


def copy_grid(grid: Grid) -> Grid:
    """Row-wise copy (new outer and inner lists)."""
    return [list(row) for row in grid]


def zeros_like(grid: Grid, fill: int = 0) -> Grid:
    """New grid of the same shape filled with `fill`."""
    H, W = grid_shape(grid)
    return [[fill] * W for _ in range(H)]


def same_shape(a: Grid, b: Grid) -> bool:
    if len(a) != len(b):
        return False
    return all(len(ra) == len(rb) for ra, rb in zip(a, b))


def in_bounds(pixel: Pixel, H: int, W: int) -> bool:
    return 0 <= pixel.row < H and 0 <= pixel.col < W


def check_connectivity(connectivity: int) -> int:
    """Raises ValueError unless connectivity is 4 or 8."""
    if connectivity not in (4, 8):
        raise ValueError(f"Connectivity must be 4 or 8, got {connectivity!r}")
    return connectivity


def neighbors(pixel: Pixel, H: int, W: int, connectivity: int = 4) -> List[Pixel]:
    """
    In-bounds neighbors of a pixel.

    4-connectivity: up, right, down, left.
    8-connectivity: N, NE, E, SE, S, SW, W, NW (clockwise from top).
    """
    offsets = OFFSETS_8 if check_connectivity(connectivity) == 8 else OFFSETS_4
    r, c = pixel.row, pixel.col
    result = []
    for dr, dc in offsets:
        nr, nc = r + dr, c + dc
        if 0 <= nr < H and 0 <= nc < W:
            result.append(Pixel(nr, nc))
    return result


def cells_with_values(grid: Grid, values: Iterable[int]) -> set[Pixel]:
    """All pixels whose value is in `values`."""
    wanted = set(values)
    return {
        Pixel(r, c)
        for r, row in enumerate(grid)
        for c, value in enumerate(row)
        if value in wanted
    }


def bounding_box(pixels: Iterable[Pixel]) -> BBox:
    """Inclusive (r_min, r_max, c_min, c_max) of a non-empty pixel set."""
    pixels = list(pixels)
    if not pixels:
        raise ValueError("Bounding box requires at least one pixel")
    rows = [p.row for p in pixels]
    cols = [p.col for p in pixels]
    return (min(rows), max(rows), min(cols), max(cols))


def bbox_pixels(bbox: BBox) -> List[Pixel]:
    """Pixels of an inclusive bounding box in row-major order."""
    r_min, r_max, c_min, c_max = bbox
    return [
        Pixel(r, c)
        for r in range(r_min, r_max + 1)
        for c in range(c_min, c_max + 1)
    ]
