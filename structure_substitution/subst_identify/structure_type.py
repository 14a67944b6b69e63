"""
Structure-type identification as an ordered rule table.

Each rule is (name, predicate over DescriptionSignals, builder). Rules are
evaluated top to bottom and the first matching predicate wins; the final
fallback is a low-confidence connectedRegions type with 4-connectivity.

Confidence is the fraction of a rule's corroborating signals that the
description actually carries.
"""

import logging
from typing import Callable, List, Optional, Tuple

from subst_core.types import StructureKind, StructureParams, StructureType

from .signals import DescriptionSignals, extract_signals

logger = logging.getLogger(__name__)

Predicate = Callable[[DescriptionSignals], bool]
Builder = Callable[[DescriptionSignals], StructureType]


def _score(checks: List[Tuple[str, bool]]) -> Tuple[float, Tuple[str, ...]]:
    """(fraction of satisfied checks, names of satisfied checks)"""
    present = tuple(name for name, ok in checks if ok)
    return len(present) / len(checks), present


def _pattern_type(s: DescriptionSignals) -> Optional[str]:
    if s.has_column and s.has_row:
        return "both"
    if s.has_column:
        return "column"
    if s.has_row:
        return "row"
    return None


# =============================================================================
# Builders
# =============================================================================

def _build_path(s: DescriptionSignals) -> StructureType:
    confidence, present = _score([
        ("path_phrase", s.path),
        ("landmarks", bool(s.path_landmarks or s.adjacency_landmarks)),
        ("target_value", s.target_value is not None),
        ("path_limit_or_connectivity", s.max_path_length is not None or s.connectivity is not None),
    ])
    params = StructureParams(
        target_value=s.target_value,
        adjacent_to=tuple(s.adjacency_landmarks),
        path_to_landmarks=tuple(s.path_landmarks),
        requires_path_connectivity=True,
        connectivity=s.connectivity,
        max_path_length=s.max_path_length,
    )
    return StructureType(StructureKind.VALUE_WITH_ADJACENCY, confidence, params, present)


def _build_adjacency(s: DescriptionSignals) -> StructureType:
    confidence, present = _score([
        ("adjacency_phrase", s.adjacency),
        ("landmarks", bool(s.adjacency_landmarks)),
        ("target_value", s.target_value is not None),
    ])
    params = StructureParams(
        target_value=s.target_value,
        adjacent_to=tuple(s.adjacency_landmarks),
        connectivity=s.connectivity,
    )
    kind = StructureKind.CONNECTED_REGIONS if s.has_region else StructureKind.VALUE_WITH_ADJACENCY
    return StructureType(kind, confidence, params, present)


def _build_boundary(s: DescriptionSignals) -> StructureType:
    confidence, present = _score([
        ("boundary_vocabulary", s.has_boundary),
        ("target_value", s.target_value is not None),
        ("shape_vocabulary", s.has_rect or s.has_region),
    ])
    params = StructureParams(
        target_value=s.target_value,
        pattern_type=_pattern_type(s),
        column_count=s.column_count,
        row_count=s.row_count,
    )
    return StructureType(StructureKind.BOUNDARY, confidence, params, present)


def _build_pattern(s: DescriptionSignals) -> StructureType:
    pattern_type = _pattern_type(s)
    if pattern_type == "column":
        kind = StructureKind.COLUMN_PATTERN
    elif pattern_type == "row":
        kind = StructureKind.ROW_PATTERN
    else:
        kind = StructureKind.RECTANGULAR_PATTERN

    confidence, present = _score([
        ("pattern_vocabulary", s.has_column or s.has_row or s.has_rect),
        ("target_value", s.target_value is not None),
        ("run_threshold", s.column_count is not None or s.row_count is not None or bool(s.dimensions)),
    ])
    params = StructureParams(
        target_value=s.target_value,
        pattern_type=pattern_type,
        column_count=s.column_count,
        row_count=s.row_count,
    )
    return StructureType(kind, confidence, params, present)


def _build_plus(s: DescriptionSignals) -> StructureType:
    """
    Plus/cross shapes are scanned as solid blocks of the target value.

    A hollow plus ring is not a solid block, so it recognizes nothing and
    leaves room for the fixed plus→cross rewrite.
    """
    confidence, present = _score([
        ("plus_vocabulary", s.has_plus),
        ("target_value", s.target_value is not None),
        ("dimensions", bool(s.dimensions)),
    ])
    params = StructureParams(target_value=s.target_value)
    return StructureType(StructureKind.RECTANGULAR_PATTERN, confidence, params, present)


def _build_regions(s: DescriptionSignals) -> StructureType:
    confidence, present = _score([
        ("region_vocabulary", s.has_region),
        ("target_value", s.target_value is not None),
        ("connectivity", s.connectivity is not None),
    ])
    params = StructureParams(target_value=s.target_value, connectivity=s.connectivity or 4)
    return StructureType(StructureKind.CONNECTED_REGIONS, confidence, params, present)


def _build_value(s: DescriptionSignals) -> StructureType:
    # A bare value is one weak signal
    params = StructureParams(target_value=s.target_value, connectivity=s.connectivity)
    return StructureType(StructureKind.VALUE, 0.34, params, ("target_value",))


def _build_fallback(s: DescriptionSignals) -> StructureType:
    confidence = 0.05 if s.tokens else 0.0
    return StructureType(
        StructureKind.CONNECTED_REGIONS,
        confidence,
        StructureParams(target_value=s.target_value, connectivity=4),
        (),
    )


# =============================================================================
# Rule table (first match wins)
# =============================================================================

STRUCTURE_RULES: List[Tuple[str, Predicate, Builder]] = [
    ("path_to_landmarks", lambda s: s.path and bool(s.path_landmarks or s.adjacency_landmarks), _build_path),
    ("adjacent_to_landmarks", lambda s: s.adjacency and bool(s.adjacency_landmarks), _build_adjacency),
    ("boundary", lambda s: s.has_boundary, _build_boundary),
    ("spatial_pattern", lambda s: s.has_column or s.has_row or s.has_rect, _build_pattern),
    ("plus_shape", lambda s: s.has_plus, _build_plus),
    ("connected_regions", lambda s: s.has_region and s.target_value is not None, _build_regions),
    ("value", lambda s: s.target_value is not None, _build_value),
]


def identify_structure_type(description) -> StructureType:
    """
    Classify an input-structure description.

    Never raises: a rule that fails is logged and skipped, and when no rule
    matches the fallback connectedRegions type is returned.

    Examples:
        >>> identify_structure_type("connected regions of 3").type
        'connectedRegions'
        >>> identify_structure_type("").confidence
        0.0
    """
    try:
        signals = extract_signals(description)
    except Exception:
        logger.exception("Signal extraction failed; using fallback structure type")
        signals = DescriptionSignals(text="")

    for name, predicate, builder in STRUCTURE_RULES:
        try:
            if predicate(signals):
                structure_type = builder(signals)
                logger.debug(f"Structure rule '{name}' matched: {structure_type.type}")
                return structure_type
        except Exception:
            logger.exception(f"Structure rule '{name}' failed; skipping")

    return _build_fallback(signals)
