"""
Substitution-rule identification as an ordered rule table.

The output description is read relative to the already classified input
type: the input's target value is the "from" value, so a recolor to that
same value collapses into `keep`, and value candidates in the output
skip the input's target.

Operators and their tags:
- extractByBoundary: preserves topology, changes emphasis
- shift: preserves structure_integrity, changes position
- fillBoundingBox: preserves position, changes topology and size
- clearBoundingBox / clear: preserves position, changes presence
- recolor: preserves structure_integrity and position, changes color
- keep: preserves structure_integrity, position and topology
- generic: no tags (unrecognized output description)
"""

import logging
from typing import Callable, List, Optional, Tuple

from subst_core.types import StructureType, SubstitutionRule

from .signals import DescriptionSignals, extract_signals

logger = logging.getLogger(__name__)

GENERIC_OPERATOR = "generic"

CROSS_WORDS = {"cross", "crosses", "hollow", "hollowed", "outline", "outlines", "outlined", "boundary", "border", "perimeter", "frame"}
SHIFT_WORDS = {
    "move", "moved", "moves", "shift", "shifted", "shifts", "slide", "slid", "slides",
    "translate", "translated", "fall", "falls", "drop", "dropped", "gravity", "compact", "compacted",
}
SLIDE_WORDS = {"fall", "falls", "drop", "dropped", "gravity", "compact", "compacted", "until"}
FILL_WORDS = {"fill", "filled", "fills", "solid"}
BOX_WORDS = {"bounding", "box", "bbox", "rectangle", "enclosing"}
CLEAR_WORDS = {
    "clear", "cleared", "remove", "removed", "erase", "erased", "delete", "deleted",
    "disappear", "disappears", "vanish", "vanishes", "empty",
}
RECOLOR_WORDS = {
    "recolor", "recolored", "recolour", "recoloured", "color", "colored", "colour", "coloured",
    "become", "becomes", "turn", "turns", "turned", "replace", "replaced", "change", "changed",
    "paint", "painted", "fill", "filled",
}
KEEP_WORDS = {"same", "unchanged", "preserve", "preserved", "keep", "kept", "identical", "intact", "retain", "retained"}

DIRECTIONS = {
    "up": (-1, 0), "upward": (-1, 0), "upwards": (-1, 0), "north": (-1, 0),
    "down": (1, 0), "downward": (1, 0), "downwards": (1, 0), "south": (1, 0),
    "left": (0, -1), "leftward": (0, -1), "west": (0, -1),
    "right": (0, 1), "rightward": (0, 1), "east": (0, 1),
}

Predicate = Callable[[DescriptionSignals, StructureType], bool]
Builder = Callable[[DescriptionSignals, StructureType], SubstitutionRule]


def _new_value(s: DescriptionSignals, input_type: Optional[StructureType]) -> Optional[int]:
    """First output value that differs from the input's target value."""
    source = input_type.params.target_value if input_type is not None else None
    for value in s.values:
        if value != source:
            return value
    return None


def _is_extract_by_boundary(s: DescriptionSignals) -> bool:
    return s.has_any(CROSS_WORDS) or s.has_phrase(("extract", "by", "boundary"))


# =============================================================================
# Builders
# =============================================================================

def _build_extract(s, input_type) -> SubstitutionRule:
    params = {}
    value = _new_value(s, input_type)
    if value is not None:
        params["value"] = value
    return SubstitutionRule(
        operator="extractByBoundary",
        preserves=frozenset({"topology"}),
        changes=frozenset({"emphasis"}),
        params=params,
    )


def _build_shift(s, input_type) -> SubstitutionRule:
    direction = next((DIRECTIONS[t] for t in s.tokens if t in DIRECTIONS), None)
    if direction is None:
        # Gravity phrasing without a direction means down
        direction = (1, 0)

    params = {"direction": list(direction)}
    if s.max_path_length is not None:
        params["steps"] = s.max_path_length
    elif s.has_any(SLIDE_WORDS):
        params["until_blocked"] = True
    else:
        steps = _new_value(s, input_type)
        params["steps"] = steps if steps is not None else 1

    return SubstitutionRule(
        operator="shift",
        preserves=frozenset({"structure_integrity"}),
        changes=frozenset({"position"}),
        params=params,
    )


def _build_fill_box(s, input_type) -> SubstitutionRule:
    params = {}
    value = _new_value(s, input_type)
    if value is not None:
        params["value"] = value
    return SubstitutionRule(
        operator="fillBoundingBox",
        preserves=frozenset({"position"}),
        changes=frozenset({"topology", "size"}),
        params=params,
    )


def _build_clear_box(s, input_type) -> SubstitutionRule:
    return SubstitutionRule(
        operator="clearBoundingBox",
        preserves=frozenset({"position"}),
        changes=frozenset({"presence"}),
    )


def _build_clear(s, input_type) -> SubstitutionRule:
    return SubstitutionRule(
        operator="clear",
        preserves=frozenset({"position"}),
        changes=frozenset({"presence"}),
    )


def _build_recolor(s, input_type) -> SubstitutionRule:
    value = _new_value(s, input_type)
    if value is None:
        return _build_keep(s, input_type)
    return SubstitutionRule(
        operator="recolor",
        preserves=frozenset({"structure_integrity", "position"}),
        changes=frozenset({"color"}),
        params={"value": value},
    )


def _build_keep(s, input_type) -> SubstitutionRule:
    return SubstitutionRule(
        operator="keep",
        preserves=frozenset({"structure_integrity", "position", "topology"}),
        changes=frozenset(),
    )


# =============================================================================
# Rule table (first match wins)
# =============================================================================

SUBSTITUTION_RULES: List[Tuple[str, Predicate, Builder]] = [
    ("extract_by_boundary", lambda s, t: _is_extract_by_boundary(s), _build_extract),
    ("shift", lambda s, t: s.has_any(SHIFT_WORDS), _build_shift),
    ("fill_bounding_box", lambda s, t: s.has_any(FILL_WORDS) and s.has_any(BOX_WORDS), _build_fill_box),
    ("clear_bounding_box", lambda s, t: s.has_any(CLEAR_WORDS) and s.has_any(BOX_WORDS), _build_clear_box),
    ("clear", lambda s, t: s.has_any(CLEAR_WORDS), _build_clear),
    ("recolor", lambda s, t: s.has_any(RECOLOR_WORDS) or _new_value(s, t) is not None, _build_recolor),
    ("keep", lambda s, t: s.has_any(KEEP_WORDS) or bool(s.values), _build_keep),
]


def generic_rule() -> SubstitutionRule:
    return SubstitutionRule(operator=GENERIC_OPERATOR)


def identify_substitution_rule(description, input_type: Optional[StructureType] = None) -> SubstitutionRule:
    """
    Derive the substitution rule for an output-structure description.

    Never raises: failing rules are logged and skipped, and an
    unrecognized description yields the generic rule with no tags.

    Examples:
        >>> identify_substitution_rule("cross of 2s").operator
        'extractByBoundary'
        >>> identify_substitution_rule("something else").operator
        'generic'
    """
    try:
        signals = extract_signals(description)
    except Exception:
        logger.exception("Signal extraction failed; using generic substitution rule")
        return generic_rule()

    for name, predicate, builder in SUBSTITUTION_RULES:
        try:
            if predicate(signals, input_type):
                rule = builder(signals, input_type)
                logger.debug(f"Substitution rule '{name}' matched: {rule.operator}")
                return rule
        except Exception:
            logger.exception(f"Substitution rule '{name}' failed; skipping")

    return generic_rule()
