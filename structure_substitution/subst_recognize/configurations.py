"""
Spatial configuration scans: column runs, row runs and solid blocks.

- Column pattern: vertical runs of a value with length ≥ min_columns
- Row pattern: horizontal runs of a value with length ≥ min_rows
- Rectangular block: 4-connected regions of a value whose bounding box is
  completely filled, at least min_height × min_width

Kinds are reported in priority order (columns, rows, blocks). Instances of
one kind never overlap; instances of different kinds may, since no
deduplication happens across kinds.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import numpy as np
from scipy import ndimage

from subst_core.components import make_structure, sort_structures
from subst_core.types import Grid, Pixel, RecognizedStructure


@dataclass(frozen=True)
class ColumnPattern:
    target_value: int
    min_columns: int = 3


@dataclass(frozen=True)
class RowPattern:
    target_value: int
    min_rows: int = 3


@dataclass(frozen=True)
class RectangularBlock:
    target_value: int
    min_height: int = 2
    min_width: int = 2


@dataclass(frozen=True)
class SpatialConfig:
    """Which configuration kinds to scan for (None = skip that kind)."""
    column_pattern: Optional[ColumnPattern] = None
    row_pattern: Optional[RowPattern] = None
    rectangular_block: Optional[RectangularBlock] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SpatialConfig":
        """
        Build from a dict such as
        {"columnPattern": {"targetValue": 3, "minColumns": 4}, ...}.
        """
        def entry(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        def get(d, snake, camel, default=None):
            if snake in d:
                return d[snake]
            return d.get(camel, default)

        column = entry("column_pattern", "columnPattern")
        row = entry("row_pattern", "rowPattern")
        block = entry("rectangular_block", "rectangularBlock")

        return cls(
            column_pattern=ColumnPattern(
                get(column, "target_value", "targetValue"),
                get(column, "min_columns", "minColumns", 3),
            ) if column is not None else None,
            row_pattern=RowPattern(
                get(row, "target_value", "targetValue"),
                get(row, "min_rows", "minRows", 3),
            ) if row is not None else None,
            rectangular_block=RectangularBlock(
                get(block, "target_value", "targetValue"),
                get(block, "min_height", "minHeight", 2),
                get(block, "min_width", "minWidth", 2),
            ) if block is not None else None,
        )


def _runs(line: np.ndarray) -> List[tuple[int, int]]:
    """
    (start, length) of each maximal True run in a 1-D bool array.

    Pads with False on both sides and diffs: +1 marks a run start,
    -1 marks one past its end.
    """
    padded = np.concatenate(([False], line.astype(bool), [False]))
    edges = np.diff(padded.astype(np.int8))
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return [(int(s), int(e - s)) for s, e in zip(starts, ends)]


def find_column_runs(X: np.ndarray, target_value: int, min_length: int) -> List[RecognizedStructure]:
    """Vertical runs of `target_value` with length ≥ min_length."""
    mask = X == target_value
    results = []
    for c in range(X.shape[1]):
        for start, length in _runs(mask[:, c]):
            if length >= min_length:
                cells = [Pixel(start + i, c) for i in range(length)]
                results.append(make_structure(cells, target_value, "column_run"))
    return sort_structures(results)


def find_row_runs(X: np.ndarray, target_value: int, min_length: int) -> List[RecognizedStructure]:
    """Horizontal runs of `target_value` with length ≥ min_length."""
    mask = X == target_value
    results = []
    for r in range(X.shape[0]):
        for start, length in _runs(mask[r, :]):
            if length >= min_length:
                cells = [Pixel(r, start + i) for i in range(length)]
                results.append(make_structure(cells, target_value, "row_run"))
    return sort_structures(results)


def find_solid_blocks(
    X: np.ndarray,
    target_value: int,
    min_height: int = 2,
    min_width: int = 2,
) -> List[RecognizedStructure]:
    """
    Solid rectangles of `target_value`.

    Each 4-connected region is a block iff it fills its bounding box.
    """
    mask = X == target_value
    if not mask.any():
        return []

    # 4-connected labelling (cross-shaped structuring element)
    labels, count = ndimage.label(mask, structure=ndimage.generate_binary_structure(2, 1))
    results = []
    for label_id, slc in enumerate(ndimage.find_objects(labels), start=1):
        if slc is None:
            continue
        window = labels[slc] == label_id
        height, width = window.shape
        if height < min_height or width < min_width:
            continue
        if not window.all():
            continue
        r0, c0 = slc[0].start, slc[1].start
        cells = [Pixel(r0 + dr, c0 + dc) for dr in range(height) for dc in range(width)]
        results.append(make_structure(cells, target_value, "block"))
    return sort_structures(results)


def recognize_spatial_configurations(grid: Grid, config) -> List[RecognizedStructure]:
    """
    Scan for every requested configuration kind.

    Args:
        grid: Grid to scan
        config: SpatialConfig or an equivalent dict

    Returns:
        Column runs, then row runs, then blocks; each kind in row-major
        order of its lex_min cell. Kinds with no target value are skipped.
    """
    if config is None:
        return []
    if not isinstance(config, SpatialConfig):
        config = SpatialConfig.from_mapping(config)
    if not grid or not grid[0]:
        return []

    X = np.array(grid, dtype=np.int64)
    results: List[RecognizedStructure] = []

    column = config.column_pattern
    if column is not None and column.target_value is not None:
        results.extend(find_column_runs(X, column.target_value, column.min_columns))

    row = config.row_pattern
    if row is not None and row.target_value is not None:
        results.extend(find_row_runs(X, row.target_value, row.min_rows))

    block = config.rectangular_block
    if block is not None and block.target_value is not None:
        results.extend(find_solid_blocks(X, block.target_value, block.min_height, block.min_width))

    return results
