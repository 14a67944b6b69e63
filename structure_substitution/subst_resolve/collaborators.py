"""
External collaborators of the orchestrator.

- ShortcutStore: learned (structure type, rule) compositions. The shipped
  NoShortcutStore always misses; it is an extension point, injected so tests
  can substitute a deterministic stub.
- UnknownStructureTracker: write-only sink for "unknown structure" events.
  Recording is fire-and-forget: safe_record() swallows every fault after
  logging it.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from subst_core.types import (
    Grid,
    ResolutionParams,
    StructureKind,
    StructureType,
    SubstitutionRule,
    UnknownStructureEvent,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Learned shortcuts
# =============================================================================

class ShortcutStore:
    """Lookup of learned compositions; must be side-effect free on a miss."""

    def lookup(
        self,
        structure_type: StructureType,
        rule: SubstitutionRule,
        params: ResolutionParams,
    ) -> Optional[Grid]:
        raise NotImplementedError


class NoShortcutStore(ShortcutStore):
    """
    Always misses.

    Candidate compositions, once enough examples exist:
    - connectedRegions + shift (changes position, preserves
      structure_integrity): region compaction
    - boundary + extractByBoundary: boundary extraction with interior removal
    """

    def lookup(self, structure_type, rule, params):
        if (
            structure_type.type == StructureKind.CONNECTED_REGIONS
            and "position" in rule.changes
            and "structure_integrity" in rule.preserves
        ):
            logger.debug("Compaction composition not learned yet")
        elif structure_type.type == StructureKind.BOUNDARY and rule.operator == "extractByBoundary":
            logger.debug("Boundary extraction composition not learned yet")
        return None


# =============================================================================
# Unknown-structure trackers
# =============================================================================

class UnknownStructureTracker:
    """Sink for unknown-structure events."""

    def record(self, event: UnknownStructureEvent) -> None:
        raise NotImplementedError


class LoggingTracker(UnknownStructureTracker):
    """Writes each event as a warning log line."""

    def record(self, event: UnknownStructureEvent) -> None:
        logger.warning(
            f"Unknown structure: {event.problem_id} - {event.description!r} "
            f"(classified as {event.classified_type}, signature={event.signature})"
        )


class JsonlTracker(UnknownStructureTracker):
    """
    Appends one JSON object per event to a file.

    Writes are serialized with a lock so trackers shared across threads
    never interleave lines.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, event: UnknownStructureEvent) -> None:
        line = json.dumps(event.to_dict(), sort_keys=True)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a") as f:
                f.write(line + "\n")


def safe_record(tracker: Optional[UnknownStructureTracker], event: UnknownStructureEvent) -> bool:
    """
    Record an event without ever raising.

    Returns:
        True if the tracker accepted the event
    """
    if tracker is None:
        return False
    try:
        tracker.record(event)
    except Exception:
        logger.exception(f"Unknown-structure tracker failed for {event.problem_id}; event skipped")
        return False
    return True
