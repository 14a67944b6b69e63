"""
Structure substitution orchestrator.

Three-step operation:
1. RECOGNIZE what structure exists (classify descriptions, locate instances)
2. IDENTIFY the substitution rule (what changes, what is preserved)
3. APPLY the rule to every instance

State flow:
    Classify → ShortcutCheck → Recognize → {Apply | LegacyFallback | Unrecognized}

Every terminal state returns a grid of the input's shape: the rewritten
grid, the legacy plus→cross grid, or an unchanged copy. No exception
reaches the caller; faults are logged and, for recognition and
application, recorded as unknown structures.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple, Union

from subst_apply.legacy import legacy_pattern_matches, replace_plus_with_cross
from subst_apply.substitution import apply_substitution
from subst_core.grid import copy_grid, grid_shape, same_shape, validate_grid, zeros_like
from subst_core.order_hash import constraint_signature
from subst_core.types import (
    Empty,
    Faulted,
    Grid,
    Recognized,
    RecognizedStructure,
    ResolutionParams,
    StageResult,
    StructureType,
    SubstitutionRule,
    UnknownStructureEvent,
)
from subst_identify.structure_type import identify_structure_type
from subst_identify.substitution_rule import identify_substitution_rule
from subst_recognize.dispatch import dispatch_recognition

from .collaborators import LoggingTracker, NoShortcutStore, ShortcutStore, UnknownStructureTracker, safe_record
from .config import ResolutionConfig

logger = logging.getLogger(__name__)


class Outcome:
    """Terminal outcomes of a resolution."""
    APPLIED = "applied"
    SHORTCUT = "shortcut"
    LEGACY = "legacy"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ResolutionOutcome:
    """Output grid plus what happened on the way."""
    grid: Grid
    outcome: str
    structure_type: Optional[StructureType] = None
    rule: Optional[SubstitutionRule] = None
    instances: Tuple[RecognizedStructure, ...] = ()
    reason: Optional[str] = None


class ConstraintResolver:
    """
    Sequences identification, recognition and substitution.

    Collaborators are injected: `shortcuts` (read-only lookup) and
    `tracker` (write-only unknown-structure sink). The resolver holds no
    per-call state, so one instance may serve concurrent calls over
    different grids.
    """

    def __init__(
        self,
        shortcuts: Optional[ShortcutStore] = None,
        tracker: Optional[UnknownStructureTracker] = None,
        config: Optional[ResolutionConfig] = None,
    ):
        self.shortcuts = shortcuts if shortcuts is not None else NoShortcutStore()
        self.tracker = tracker if tracker is not None else LoggingTracker()
        self.config = config if config is not None else ResolutionConfig()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def resolve(self, grid: Grid, params: Union[ResolutionParams, Mapping[str, Any]]) -> Grid:
        """Resolve and return only the output grid."""
        return self.resolve_with_outcome(grid, params).grid

    def resolve_with_outcome(
        self,
        grid: Grid,
        params: Union[ResolutionParams, Mapping[str, Any]],
    ) -> ResolutionOutcome:
        if not isinstance(params, ResolutionParams):
            params = ResolutionParams.from_dict(params or {})

        # Classify
        structure_type = identify_structure_type(params.input_structure)
        rule = identify_substitution_rule(params.output_structure, structure_type)
        logger.info(
            f"Identified structure type: {structure_type.type} "
            f"(confidence: {structure_type.confidence:.2f})"
        )
        logger.info(f"Substitution operator: {rule.operator}")

        try:
            validate_grid(grid)
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid grid for {params.problem_id}: {e}")
            return self._unrecognized(grid, params, structure_type, rule, Faulted(str(e)))

        # ShortcutCheck
        shortcut = self._lookup_shortcut(grid, structure_type, rule, params)
        if shortcut is not None:
            logger.info("Using learned composition shortcut")
            return ResolutionOutcome(shortcut, Outcome.SHORTCUT, structure_type, rule)

        # Recognize
        recognition = self._recognize(grid, structure_type)

        if isinstance(recognition, Recognized):
            logger.info(f"Recognized {len(recognition.instances)} structure(s)")
            try:
                result = apply_substitution(
                    grid,
                    recognition.instances,
                    rule,
                    preserve_non_matching=params.preserve_non_matching,
                    background=self.config.background,
                )
            except Exception as e:
                logger.exception("Error in structure substitution")
                return self._unrecognized(grid, params, structure_type, rule, Faulted(f"{type(e).__name__}: {e}"))
            return ResolutionOutcome(result, Outcome.APPLIED, structure_type, rule, recognition.instances)

        if isinstance(recognition, Empty) and legacy_pattern_matches(
            params.input_structure, params.output_structure
        ):
            logger.info("Using legacy plus→cross pattern")
            baseline = copy_grid(grid) if params.preserve_non_matching else zeros_like(grid)
            return ResolutionOutcome(
                replace_plus_with_cross(grid, baseline), Outcome.LEGACY, structure_type, rule
            )

        return self._unrecognized(grid, params, structure_type, rule, recognition)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _lookup_shortcut(self, grid, structure_type, rule, params) -> Optional[Grid]:
        try:
            hit = self.shortcuts.lookup(structure_type, rule, params)
        except Exception:
            logger.exception("Shortcut lookup failed; continuing without shortcut")
            return None
        if hit is None:
            return None
        if not same_shape(hit, grid):
            logger.warning(
                f"Shortcut grid shape {grid_shape(hit)} differs from input {grid_shape(grid)}; ignored"
            )
            return None
        return copy_grid(hit)

    def _recognize(self, grid: Grid, structure_type: StructureType) -> StageResult:
        try:
            instances = dispatch_recognition(grid, structure_type, self.config.recognition_defaults())
        except Exception as e:
            logger.exception("Error in structure recognition")
            return Faulted(f"{type(e).__name__}: {e}")
        if not instances:
            return Empty()
        return Recognized(tuple(instances))

    def _unrecognized(self, grid, params, structure_type, rule, stage: StageResult) -> ResolutionOutcome:
        reason = stage.reason if isinstance(stage, Faulted) else None
        try:
            signature = constraint_signature(structure_type, rule)
        except (TypeError, ValueError):
            logger.exception("Could not compute constraint signature")
            signature = None

        event = UnknownStructureEvent(
            problem_id=str(params.problem_id) if params.problem_id is not None else "unknown",
            description=params.input_structure or "",
            classified_type=structure_type.type,
            timestamp=datetime.now(timezone.utc).isoformat(),
            signature=signature,
            structures_found=0,
            reason=reason,
        )
        if safe_record(self.tracker, event):
            logger.info(f"Unknown structure logged for {event.problem_id} (signature={signature})")
        logger.warning("No structures recognized - returning unchanged grid")
        return ResolutionOutcome(_unchanged_copy(grid), Outcome.UNRECOGNIZED, structure_type, rule, reason=reason)


def _unchanged_copy(grid) -> Grid:
    """Copy of whatever rows the caller passed; [] when it is not a row sequence."""
    try:
        return copy_grid(grid)
    except TypeError:
        return []


def structure_substitution(
    grid: Grid,
    params: Union[ResolutionParams, Mapping[str, Any]],
    shortcuts: Optional[ShortcutStore] = None,
    tracker: Optional[UnknownStructureTracker] = None,
    config: Optional[ResolutionConfig] = None,
) -> Grid:
    """One-shot resolution with optional collaborators."""
    return ConstraintResolver(shortcuts, tracker, config).resolve(grid, params)
