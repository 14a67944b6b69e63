"""
Connected component extraction over a single cell value.

- Components = maximal sets of equal-valued cells under 4- or 8-connectivity
- Deterministic order: components sorted by lex_min (row-major)
- Each component becomes a RecognizedStructure carrying its bbox and size

Used by the region recognizers and by the configuration scans that need
per-cell grouping.
"""

from collections import deque
from typing import Iterable, List, Optional, Set

from .grid import bounding_box, check_connectivity, grid_shape, neighbors
from .types import Grid, Pixel, RecognizedStructure

# Type aliases
PixelSet = Set[Pixel]


def flood_fill(grid: Grid, start: Pixel, connectivity: int = 4) -> PixelSet:
    """
    BFS flood fill from `start` over cells equal to the start value.

    Args:
        grid: Grid to read values from
        start: Seed pixel
        connectivity: 4 or 8

    Returns:
        The maximal connected set containing `start`
    """
    H, W = grid_shape(grid)
    value = grid[start.row][start.col]
    component = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        for nb in neighbors(current, H, W, connectivity):
            if nb in component:
                continue
            if grid[nb.row][nb.col] != value:
                continue
            component.add(nb)
            queue.append(nb)

    return component


def find_components(grid: Grid, target_value: int, connectivity: int = 4) -> List[PixelSet]:
    """
    All maximal connected components of `target_value`.

    Seeds are visited in row-major order, so the returned list is already
    ordered by each component's topmost-leftmost cell.
    """
    check_connectivity(connectivity)
    H, W = grid_shape(grid)
    seen: PixelSet = set()
    components = []

    for r in range(H):
        for c in range(W):
            if grid[r][c] != target_value:
                continue
            seed = Pixel(r, c)
            if seed in seen:
                continue
            component = flood_fill(grid, seed, connectivity)
            seen |= component
            components.append(component)

    return components


def make_structure(
    pixels: Iterable[Pixel],
    value: int,
    kind: str,
    landmark_distance: Optional[int] = None,
) -> RecognizedStructure:
    """
    Wrap a pixel set with its derived metadata.

    Raises:
        ValueError: if the pixel set is empty
    """
    cells = frozenset(pixels)
    if not cells:
        raise ValueError("A recognized structure must have at least one cell")

    return RecognizedStructure(
        cells=cells,
        value=value,
        kind=kind,
        lex_min=min(cells),
        bbox=bounding_box(cells),
        size=len(cells),
        landmark_distance=landmark_distance,
    )


def boundary_cells(cells: PixelSet) -> PixelSet:
    """
    Cells with at least one 4-neighbor outside the set.

    Grid edges do not matter here: a missing neighbor is outside the set.
    """
    boundary = set()
    for pixel in cells:
        r, c = pixel
        neighbors_4 = [
            Pixel(r - 1, c),  # up
            Pixel(r + 1, c),  # down
            Pixel(r, c - 1),  # left
            Pixel(r, c + 1),  # right
        ]
        if any(nb not in cells for nb in neighbors_4):
            boundary.add(pixel)
    return boundary


def sort_structures(structures: Iterable[RecognizedStructure]) -> List[RecognizedStructure]:
    """Row-major order of each instance's topmost-leftmost cell."""
    return sorted(structures, key=lambda s: (s.lex_min, -s.size, s.kind))
