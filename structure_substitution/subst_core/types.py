"""
Core type definitions for the structure substitution engine.

Every descriptor here is built fresh per resolution call and discarded
afterwards; nothing in the core is persistent.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, NewType, Optional, Tuple, Union

# Grid representation
Grid = list[list[int]]  # Grid[r][c] = cell value ≥ 0

# Hash type (64-bit from SHA-256)
Hash64 = NewType("Hash64", int)


# Pixel coordinates (row, col)
@dataclass(frozen=True, order=True)
class Pixel:
    """Cell coordinates in row-major order."""
    row: int
    col: int

    def __iter__(self):
        """Allow tuple unpacking: r, c = pixel"""
        return iter((self.row, self.col))


# A landmark is either a cell value or a concrete coordinate
Landmark = Union[int, Pixel]

# Bounding box (r_min, r_max, c_min, c_max), inclusive
BBox = Tuple[int, int, int, int]


# =============================================================================
# Structure types
# =============================================================================

class StructureKind:
    """Closed set of structure-type variants."""
    VALUE = "value"
    VALUE_WITH_ADJACENCY = "valueWithAdjacency"
    CONNECTED_REGIONS = "connectedRegions"
    BOUNDARY = "boundary"
    COLUMN_PATTERN = "columnPattern"
    ROW_PATTERN = "rowPattern"
    RECTANGULAR_PATTERN = "rectangularPattern"

    ALL = (
        VALUE,
        VALUE_WITH_ADJACENCY,
        CONNECTED_REGIONS,
        BOUNDARY,
        COLUMN_PATTERN,
        ROW_PATTERN,
        RECTANGULAR_PATTERN,
    )

    @classmethod
    def is_pattern(cls, kind: str) -> bool:
        return kind in (cls.COLUMN_PATTERN, cls.ROW_PATTERN, cls.RECTANGULAR_PATTERN)


@dataclass(frozen=True)
class StructureParams:
    """
    Parameter bag carried by a StructureType.

    - target_value: cell value the structure is made of (None = unknown)
    - adjacent_to / path_to_landmarks: landmark values or coordinates
    - connectivity: 4 or 8 (None = use the configured default)
    - max_path_length: optional bound on landmark path distance
    - pattern_type: "column", "row", "both" or None
    - column_count / row_count: run-length thresholds for pattern scans
    """
    target_value: Optional[int] = None
    adjacent_to: Tuple[Landmark, ...] = ()
    path_to_landmarks: Tuple[Landmark, ...] = ()
    requires_path_connectivity: bool = False
    connectivity: Optional[int] = None
    max_path_length: Optional[int] = None
    pattern_type: Optional[str] = None
    column_count: Optional[int] = None
    row_count: Optional[int] = None

    def to_dict(self) -> dict:
        """JSON-friendly view (coordinates become [row, col])."""
        def _landmarks(items):
            return [[p.row, p.col] if isinstance(p, Pixel) else p for p in items]

        return {
            "targetValue": self.target_value,
            "adjacentTo": _landmarks(self.adjacent_to),
            "pathToLandmarks": _landmarks(self.path_to_landmarks),
            "requiresPathConnectivity": self.requires_path_connectivity,
            "connectivity": self.connectivity,
            "maxPathLength": self.max_path_length,
            "patternType": self.pattern_type,
            "columnCount": self.column_count,
            "rowCount": self.row_count,
        }


@dataclass(frozen=True)
class StructureType:
    """
    Classified input structure.

    Exactly one variant is active per resolution attempt. `signals` names
    the description cues that corroborated the classification.
    """
    type: str
    confidence: float
    params: StructureParams = field(default_factory=StructureParams)
    signals: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.type not in StructureKind.ALL:
            raise ValueError(f"Unknown structure type: {self.type}")
        # Clamp into [0, 1]
        object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))


# =============================================================================
# Recognized structures
# =============================================================================

@dataclass(frozen=True)
class RecognizedStructure:
    """
    One located instance of a structure type.

    - cells: non-empty set of coordinates
    - value: the cell value shared by the instance
    - kind: "region", "cell", "column_run", "row_run" or "block"
    - lex_min: topmost-leftmost cell (ordering key)
    - bbox: (r_min, r_max, c_min, c_max) inclusive
    - landmark_distance: shortest path steps to a landmark, when measured
    """
    cells: frozenset[Pixel]
    value: int
    kind: str
    lex_min: Pixel
    bbox: BBox
    size: int
    landmark_distance: Optional[int] = None


# =============================================================================
# Substitution rules
# =============================================================================

@dataclass(frozen=True)
class SubstitutionRule:
    """
    Rewrite operator annotated with invariant tags.

    Tags (e.g. "structure_integrity", "position", "emphasis", "topology")
    are used for dispatch and shortcut matching only.
    """
    operator: str
    preserves: frozenset[str] = frozenset()
    changes: frozenset[str] = frozenset()
    params: Mapping[str, Any] = field(default_factory=dict)


# =============================================================================
# Resolution input
# =============================================================================

def description_text(description) -> str:
    """
    Flatten a description into one string.

    Accepts a plain string, a sequence or set of tokens/phrases (joined with
    spaces, sets in sorted order), None, or any other value (via str).
    """
    if description is None:
        return ""
    if isinstance(description, str):
        return description
    if isinstance(description, (set, frozenset)):
        description = sorted(description, key=str)
    if isinstance(description, (list, tuple)):
        return " ".join(description_text(part) for part in description)
    return str(description)


@dataclass(frozen=True)
class ResolutionParams:
    """
    Caller-supplied descriptions and policy for one resolution call.

    Descriptions may arrive as token lists; they are stored as text.
    """
    input_structure: str = ""
    output_structure: str = ""
    preserve_non_matching: bool = True
    problem_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "input_structure", description_text(self.input_structure))
        object.__setattr__(self, "output_structure", description_text(self.output_structure))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolutionParams":
        """Accept camelCase or snake_case keys."""
        def pick(snake, camel, default):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            input_structure=pick("input_structure", "inputStructure", "") or "",
            output_structure=pick("output_structure", "outputStructure", "") or "",
            preserve_non_matching=bool(pick("preserve_non_matching", "preserveNonMatching", True)),
            problem_id=pick("problem_id", "problemId", None),
        )


# =============================================================================
# Stage results
# =============================================================================

@dataclass(frozen=True)
class Recognized:
    """Recognition found at least one instance."""
    instances: Tuple[RecognizedStructure, ...]


@dataclass(frozen=True)
class Empty:
    """Recognition ran cleanly and found nothing."""


@dataclass(frozen=True)
class Faulted:
    """A collaborator raised; reason holds the error text."""
    reason: str


StageResult = Union[Recognized, Empty, Faulted]


@dataclass(frozen=True)
class UnknownStructureEvent:
    """Record handed to the unknown-structure tracker."""
    problem_id: str
    description: str
    classified_type: str
    timestamp: str
    signature: Optional[Hash64] = None
    detection_attempted: bool = True
    structures_found: int = 0
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "problemId": self.problem_id,
            "description": self.description,
            "classifiedType": self.classified_type,
            "timestamp": self.timestamp,
            "signature": self.signature,
            "detectionAttempted": self.detection_attempted,
            "structuresFound": self.structures_found,
            "reason": self.reason,
        }
