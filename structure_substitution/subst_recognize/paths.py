"""
Landmark adjacency and path-distance search.

Landmarks are cell values or explicit coordinates. Path distance is the
number of steps from a landmark cell to a component cell, walking only
through traversable cells.

Key principles:
1. One multi-source BFS from every landmark cell yields the distance map
   for all components at once (cheaper than one BFS per component)
2. BFS visits neighbors in fixed order, so distances are deterministic
3. Unreachable cells have no entry in the distance map
"""

from collections import deque
from typing import Dict, Iterable, Optional, Set

from subst_core.grid import cells_with_values, grid_shape, in_bounds, neighbors
from subst_core.types import Grid, Landmark, Pixel


def landmark_cells(grid: Grid, landmarks: Iterable[Landmark]) -> Set[Pixel]:
    """
    Resolve landmarks to concrete cells.

    Integer landmarks match every cell of that value; Pixel landmarks
    match themselves when in bounds.
    """
    H, W = grid_shape(grid)
    values = set()
    cells = set()
    for landmark in landmarks:
        if isinstance(landmark, Pixel):
            if in_bounds(landmark, H, W):
                cells.add(landmark)
        else:
            values.add(int(landmark))

    if values:
        cells |= cells_with_values(grid, values)

    return cells


def touches_landmark(
    component: Iterable[Pixel],
    landmarks: Set[Pixel],
    H: int,
    W: int,
    connectivity: int = 4,
) -> bool:
    """True if any component cell has a landmark cell among its neighbors."""
    if not landmarks:
        return False
    for pixel in component:
        for nb in neighbors(pixel, H, W, connectivity):
            if nb in landmarks:
                return True
    return False


def landmark_distances(
    grid: Grid,
    landmarks: Set[Pixel],
    passable_values: Iterable[int],
    connectivity: int = 4,
    max_steps: Optional[int] = None,
) -> Dict[Pixel, int]:
    """
    Multi-source BFS distance from the nearest landmark.

    Args:
        grid: Grid to read values from
        landmarks: Source cells (distance 0)
        passable_values: Values a path may step onto
        connectivity: 4 or 8
        max_steps: Stop expanding beyond this distance (None = unbounded)

    Returns:
        Dict pixel -> shortest step count; landmark cells map to 0
    """
    H, W = grid_shape(grid)
    passable = set(passable_values)
    dist: Dict[Pixel, int] = {}
    queue = deque()

    for source in sorted(landmarks):
        dist[source] = 0
        queue.append(source)

    while queue:
        current = queue.popleft()
        d = dist[current]
        if max_steps is not None and d >= max_steps:
            continue
        for nb in neighbors(current, H, W, connectivity):
            if nb in dist:
                continue
            if grid[nb.row][nb.col] not in passable:
                continue
            dist[nb] = d + 1
            queue.append(nb)

    return dist


def component_distance(component: Iterable[Pixel], dist: Dict[Pixel, int]) -> Optional[int]:
    """Shortest landmark distance over the component's cells (None if unreachable)."""
    reached = [dist[p] for p in component if p in dist]
    return min(reached) if reached else None
