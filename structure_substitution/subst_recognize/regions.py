"""
Value-region recognition: plain flood-fill regions and regions qualified by
a landmark relation.

- recognize_connected_regions: every maximal component of a value
- recognize_value_regions: components (or single cells) of a value that
  satisfy an adjacency or path-to-landmark condition

Both are pure: they never mutate the grid and return an empty list when
nothing matches. Output is ordered by each instance's topmost-leftmost cell.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from subst_core.components import find_components, make_structure, sort_structures
from subst_core.grid import check_connectivity, grid_shape
from subst_core.types import Grid, Landmark, Pixel, RecognizedStructure

from .paths import component_distance, landmark_cells, landmark_distances, touches_landmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegionCondition:
    """
    Relational condition attached to a value-region search.

    - adjacent_to: landmarks a component must touch directly
    - path_to_landmarks: landmarks a component must reach by a path;
      takes priority over adjacent_to when both are set
    - connectivity: neighbor model for components, adjacency and paths
    - max_path_length: longest admissible path (None = any finite path)
    - connected: group cells into flood-fill components; otherwise every
      qualifying cell is its own instance
    - traversable: values a path may cross besides the target value
    """
    adjacent_to: Tuple[Landmark, ...] = ()
    path_to_landmarks: Tuple[Landmark, ...] = ()
    connectivity: int = 4
    max_path_length: Optional[int] = None
    connected: bool = False
    traversable: Tuple[int, ...] = (0,)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RegionCondition":
        """Build from a dict using camelCase or snake_case keys."""
        def pick(snake, camel, default):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        def landmarks(raw):
            if raw is None:
                return ()
            if isinstance(raw, (int, Pixel)):
                raw = [raw]
            result = []
            for item in raw:
                if isinstance(item, (list, tuple)):
                    result.append(Pixel(int(item[0]), int(item[1])))
                else:
                    result.append(item)
            return tuple(result)

        return cls(
            adjacent_to=landmarks(pick("adjacent_to", "adjacentTo", None)),
            path_to_landmarks=landmarks(pick("path_to_landmarks", "pathToLandmarks", None)),
            connectivity=pick("connectivity", "connectivity", 4) or 4,
            max_path_length=pick("max_path_length", "maxPathLength", None),
            connected=bool(pick("connected", "connected", False)),
            traversable=tuple(pick("traversable", "traversable", (0,))),
        )


def recognize_connected_regions(
    grid: Grid,
    target_value: int,
    connectivity: int = 4,
) -> List[RecognizedStructure]:
    """
    Flood-fill every maximal component of `target_value`.

    Examples:
        Two diagonally touching cells are two regions under 4-connectivity
        and one region under 8-connectivity.

    Raises:
        ValueError: if connectivity is not 4 or 8
    """
    check_connectivity(connectivity)
    if not grid or not grid[0]:
        return []

    components = find_components(grid, target_value, connectivity)
    return [make_structure(pixels, target_value, "region") for pixels in components]


def recognize_value_regions(
    grid: Grid,
    target_value: int,
    condition: Union[RegionCondition, Mapping[str, Any], None] = None,
) -> List[RecognizedStructure]:
    """
    Cells or components of `target_value` satisfying a landmark condition.

    Condition priority:
    1. path_to_landmarks: shortest path to a landmark must exist and be
       ≤ max_path_length when one is given
    2. adjacent_to: at least one cell must neighbor a landmark cell
    3. neither: every unit qualifies

    Args:
        grid: Grid to scan
        target_value: Value the structure is made of
        condition: RegionCondition or a plain dict of the same fields

    Returns:
        Qualifying instances in row-major order of their lex_min cell
    """
    if condition is None:
        condition = RegionCondition()
    elif not isinstance(condition, RegionCondition):
        condition = RegionCondition.from_mapping(condition)

    connectivity = check_connectivity(condition.connectivity)
    if not grid or not grid[0]:
        return []

    H, W = grid_shape(grid)

    if condition.connected:
        units = find_components(grid, target_value, connectivity)
        kind = "region"
    else:
        units = [
            {Pixel(r, c)}
            for r in range(H)
            for c in range(W)
            if grid[r][c] == target_value
        ]
        kind = "cell"

    if not units:
        return []

    if condition.path_to_landmarks:
        sources = landmark_cells(grid, condition.path_to_landmarks)
        passable = {target_value, *condition.traversable}
        dist = landmark_distances(
            grid, sources, passable, connectivity, max_steps=condition.max_path_length
        )
        results = []
        for unit in units:
            d = component_distance(unit, dist)
            if d is None:
                continue
            if condition.max_path_length is not None and d > condition.max_path_length:
                continue
            results.append(make_structure(unit, target_value, kind, landmark_distance=d))
        logger.debug(
            f"Path condition kept {len(results)}/{len(units)} units "
            f"(landmarks={len(sources)}, max_path_length={condition.max_path_length})"
        )
        return sort_structures(results)

    if condition.adjacent_to:
        sources = landmark_cells(grid, condition.adjacent_to)
        results = [
            make_structure(unit, target_value, kind, landmark_distance=1)
            for unit in units
            if touches_landmark(unit, sources, H, W, connectivity)
        ]
        logger.debug(f"Adjacency condition kept {len(results)}/{len(units)} units")
        return sort_structures(results)

    return sort_structures(make_structure(unit, target_value, kind) for unit in units)
