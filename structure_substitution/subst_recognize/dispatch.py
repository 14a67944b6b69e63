"""
Route a classified StructureType to the matching recognizer.

Priority (first applicable wins):
1. value / valueWithAdjacency, or connectedRegions carrying a landmark
   relation → recognize_value_regions; a path condition outranks plain
   adjacency when both are present
2. connectedRegions without a relation → recognize_connected_regions
3. boundary or any *Pattern type → recognize_spatial_configurations

A type without a target value recognizes nothing.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from subst_core.types import Grid, RecognizedStructure, StructureKind, StructureType

from .configurations import (
    ColumnPattern,
    RectangularBlock,
    RowPattern,
    SpatialConfig,
    recognize_spatial_configurations,
)
from .regions import RegionCondition, recognize_connected_regions, recognize_value_regions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionDefaults:
    """Fallbacks for parameters the description did not pin down."""
    connectivity: int = 4
    column_count: int = 3
    row_count: int = 3
    min_block_height: int = 2
    min_block_width: int = 2
    traversable: Tuple[int, ...] = (0,)


def build_region_condition(structure_type: StructureType, defaults: RecognitionDefaults) -> RegionCondition:
    """
    Condition for a value-region search.

    Path connectivity outranks direct adjacency; when the type only flags
    `requires_path_connectivity`, the adjacency landmarks become the path
    landmarks.
    """
    params = structure_type.params
    connectivity = params.connectivity or defaults.connectivity

    if params.path_to_landmarks or params.requires_path_connectivity:
        return RegionCondition(
            path_to_landmarks=params.path_to_landmarks or params.adjacent_to,
            connectivity=connectivity,
            max_path_length=params.max_path_length,
            connected=True,
            traversable=defaults.traversable,
        )

    if params.adjacent_to:
        return RegionCondition(
            adjacent_to=params.adjacent_to,
            connectivity=connectivity,
            connected=True,
        )

    return RegionCondition(connectivity=connectivity)


def build_spatial_config(structure_type: StructureType, defaults: RecognitionDefaults) -> SpatialConfig:
    params = structure_type.params
    target = params.target_value
    pattern = params.pattern_type

    return SpatialConfig(
        column_pattern=ColumnPattern(
            target, params.column_count or defaults.column_count
        ) if pattern in ("column", "both") else None,
        row_pattern=RowPattern(
            target, params.row_count or defaults.row_count
        ) if pattern in ("row", "both") else None,
        rectangular_block=RectangularBlock(
            target, defaults.min_block_height, defaults.min_block_width
        ) if target is not None else None,
    )


def dispatch_recognition(
    grid: Grid,
    structure_type: StructureType,
    defaults: RecognitionDefaults = RecognitionDefaults(),
) -> List[RecognizedStructure]:
    """
    Run the recognizer selected by the priority policy.

    Returns:
        Recognized instances (possibly empty). Recognizer errors propagate;
        the orchestrator owns fault containment.
    """
    kind = structure_type.type
    params = structure_type.params
    has_relation = bool(params.adjacent_to or params.path_to_landmarks)

    if kind in (StructureKind.VALUE, StructureKind.VALUE_WITH_ADJACENCY) or (
        kind == StructureKind.CONNECTED_REGIONS and has_relation
    ):
        condition = build_region_condition(structure_type, defaults)
        if condition.path_to_landmarks:
            logger.info(f"Using path-based connectivity to landmarks: {list(condition.path_to_landmarks)}")
        elif condition.adjacent_to:
            logger.info(f"Using direct adjacency to: {list(condition.adjacent_to)}")
        if params.target_value is None:
            return []
        return recognize_value_regions(grid, params.target_value, condition)

    if kind == StructureKind.CONNECTED_REGIONS:
        if params.target_value is None:
            return []
        return recognize_connected_regions(
            grid, params.target_value, params.connectivity or defaults.connectivity
        )

    if kind == StructureKind.BOUNDARY or StructureKind.is_pattern(kind):
        return recognize_spatial_configurations(grid, build_spatial_config(structure_type, defaults))

    logger.warning(f"No recognizer registered for structure type {kind}")
    return []
