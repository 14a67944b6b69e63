"""
Integration tests for the full resolution pipeline.

Classify → ShortcutCheck → Recognize → {Apply | LegacyFallback | Unrecognized}

Collaborators are replaced with deterministic stubs; every scenario
checks the returned grid keeps the input's shape.
"""

import copy

import pytest

from subst_core.grid import grid_shape
from subst_core.types import ResolutionParams
from subst_resolve.config import ResolutionConfig
from subst_resolve.orchestrator import ConstraintResolver, Outcome, structure_substitution


PLUS = [
    [1, 1, 1],
    [1, 0, 1],
    [1, 1, 1],
]

CROSS = [
    [0, 2, 0],
    [2, 2, 2],
    [0, 2, 0],
]

REGIONS = [
    [3, 3, 7],
    [0, 0, 7],
    [0, 3, 0],
]

PATH_GRID = [
    [3, 0, 5, 0, 0, 3],
    [3, 0, 0, 0, 0, 3],
]


class RecordingTracker:
    def __init__(self):
        self.events = []

    def record(self, event):
        self.events.append(event)


class RaisingTracker:
    def record(self, event):
        raise RuntimeError("tracker down")


class StubShortcuts:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def lookup(self, structure_type, rule, params):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def params(inp, out, preserve=True, problem_id="task-1"):
    return ResolutionParams(inp, out, preserve, problem_id)


# =============================================================================
# Applied substitutions
# =============================================================================


class TestApplied:

    def test_recolor_regions_preserving(self):
        outcome = ConstraintResolver(tracker=RecordingTracker()).resolve_with_outcome(
            REGIONS, params("connected regions of 3", "become 4")
        )
        assert outcome.outcome == Outcome.APPLIED
        assert outcome.structure_type.type == "connectedRegions"
        assert outcome.rule.operator == "recolor"
        assert len(outcome.instances) == 2
        assert outcome.grid == [
            [4, 4, 7],
            [0, 0, 7],
            [0, 4, 0],
        ]

    def test_recolor_regions_not_preserving(self):
        result = ConstraintResolver(tracker=RecordingTracker()).resolve(
            REGIONS, params("connected regions of 3", "become 4", preserve=False)
        )
        assert result == [
            [4, 4, 0],
            [0, 0, 0],
            [0, 4, 0],
        ]

    def test_path_to_landmark(self):
        """Only the region within 2 steps of the 5 is recolored."""
        result = ConstraintResolver(tracker=RecordingTracker()).resolve(
            PATH_GRID, params("regions of 3 with a path to 5 within 2 steps", "recolor to 8")
        )
        assert result == [
            [8, 0, 5, 0, 0, 3],
            [8, 0, 0, 0, 0, 3],
        ]

    def test_generic_rule_follows_baseline(self):
        resolver = ConstraintResolver(tracker=RecordingTracker())

        kept = resolver.resolve_with_outcome(REGIONS, params("connected regions of 3", "whatever happens"))
        assert kept.outcome == Outcome.APPLIED
        assert kept.rule.operator == "generic"
        assert kept.grid == REGIONS

        cleared = resolver.resolve(REGIONS, params("connected regions of 3", "whatever happens", preserve=False))
        assert cleared == [[0, 0, 0], [0, 0, 0], [0, 0, 0]]

    def test_dict_params_camel_case(self):
        result = structure_substitution(
            REGIONS,
            {"inputStructure": "connected regions of 3", "outputStructure": "become 4", "preserveNonMatching": False},
            tracker=RecordingTracker(),
        )
        assert result[0] == [4, 4, 0]

    def test_config_connectivity(self):
        """A diagonal landmark only counts under 8-connectivity."""
        grid = [
            [1, 0],
            [0, 5],
        ]
        p = params("cells of 1 adjacent to 5", "become 6")

        four = ConstraintResolver(tracker=RecordingTracker()).resolve_with_outcome(grid, p)
        assert four.outcome == Outcome.UNRECOGNIZED

        resolver = ConstraintResolver(tracker=RecordingTracker(), config=ResolutionConfig(default_connectivity=8))
        eight = resolver.resolve_with_outcome(grid, p)
        assert eight.outcome == Outcome.APPLIED
        assert eight.grid == [[6, 0], [0, 5]]

    def test_input_never_mutated(self):
        before = copy.deepcopy(REGIONS)
        result = ConstraintResolver(tracker=RecordingTracker()).resolve(
            REGIONS, params("connected regions of 3", "become 4")
        )
        assert REGIONS == before
        assert result is not REGIONS


# =============================================================================
# Legacy fallback
# =============================================================================


class TestLegacyFallback:

    @pytest.mark.parametrize("inp", [
        "3x3 block plus",
        "3x3 block of 1s",
        "plus of 1s",
        "cardinal 1s",
        "1s forming a plus around a 0 center",
    ])
    @pytest.mark.parametrize("out", ["cross", "cross of 2s"])
    def test_plus_to_cross(self, inp, out):
        tracker = RecordingTracker()
        outcome = ConstraintResolver(tracker=tracker).resolve_with_outcome(PLUS, params(inp, out))

        assert outcome.outcome == Outcome.LEGACY
        assert outcome.grid == CROSS
        assert tracker.events == []

    def test_token_list_descriptions(self):
        """Descriptions given as token lists resolve like their joined text."""
        outcome = ConstraintResolver(tracker=RecordingTracker()).resolve_with_outcome(
            PLUS, ResolutionParams(["plus", "block"], ["cross"], True, "t")
        )
        assert outcome.outcome == Outcome.LEGACY
        assert outcome.grid == CROSS

    def test_token_list_without_match(self):
        tracker = RecordingTracker()
        result = ConstraintResolver(tracker=tracker).resolve(
            REGIONS, {"inputStructure": ["connected", "regions", "of", "9"], "outputStructure": ("become", 4)}
        )
        assert result == REGIONS
        assert tracker.events[0].description == "connected regions of 9"

    def test_legacy_respects_preserve(self):
        grid = [
            [1, 1, 1, 4],
            [1, 0, 1, 0],
            [1, 1, 1, 0],
        ]
        resolver = ConstraintResolver(tracker=RecordingTracker())

        kept = resolver.resolve(grid, params("3x3 block plus", "cross"))
        assert [row[3] for row in kept] == [4, 0, 0]

        cleared = resolver.resolve(grid, params("3x3 block plus", "cross", preserve=False))
        assert [row[3] for row in cleared] == [0, 0, 0]
        assert [row[:3] for row in cleared] == CROSS


# =============================================================================
# Unrecognized structures
# =============================================================================


class TestUnrecognized:

    def test_no_op_returns_copy_and_records(self):
        tracker = RecordingTracker()
        outcome = ConstraintResolver(tracker=tracker).resolve_with_outcome(
            REGIONS, params("connected regions of 9", "become 4", problem_id="p-42")
        )

        assert outcome.outcome == Outcome.UNRECOGNIZED
        assert outcome.grid == REGIONS
        assert outcome.grid is not REGIONS
        assert len(tracker.events) == 1
        event = tracker.events[0]
        assert event.problem_id == "p-42"
        assert event.classified_type == "connectedRegions"
        assert event.description == "connected regions of 9"
        assert event.signature is not None
        assert event.structures_found == 0

    def test_missing_problem_id(self):
        tracker = RecordingTracker()
        ConstraintResolver(tracker=tracker).resolve(REGIONS, ResolutionParams("connected regions of 9", "become 4"))
        assert tracker.events[0].problem_id == "unknown"

    def test_recognition_fault_skips_legacy(self, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("recognizer exploded")

        monkeypatch.setattr("subst_resolve.orchestrator.dispatch_recognition", broken)
        tracker = RecordingTracker()
        outcome = ConstraintResolver(tracker=tracker).resolve_with_outcome(PLUS, params("3x3 block plus", "cross"))

        assert outcome.outcome == Outcome.UNRECOGNIZED
        assert outcome.grid == PLUS
        assert "recognizer exploded" in outcome.reason
        assert "recognizer exploded" in tracker.events[0].reason

    def test_raising_tracker_is_swallowed(self):
        result = ConstraintResolver(tracker=RaisingTracker()).resolve(
            REGIONS, params("connected regions of 9", "become 4")
        )
        assert result == REGIONS

    def test_ragged_grid(self):
        grid = [[1, 2], [3]]
        tracker = RecordingTracker()
        outcome = ConstraintResolver(tracker=tracker).resolve_with_outcome(grid, params("connected regions of 1", "become 4"))

        assert outcome.outcome == Outcome.UNRECOGNIZED
        assert outcome.grid == [[1, 2], [3]]
        assert outcome.reason is not None
        assert len(tracker.events) == 1

    def test_empty_descriptions(self):
        outcome = ConstraintResolver(tracker=RecordingTracker()).resolve_with_outcome(REGIONS, params("", ""))
        assert outcome.outcome == Outcome.UNRECOGNIZED
        assert outcome.structure_type.confidence == 0.0


# =============================================================================
# Shortcut store
# =============================================================================


class TestShortcuts:

    def test_hit_short_circuits(self, monkeypatch):
        hit = [[9, 9, 9], [9, 9, 9], [9, 9, 9]]
        shortcuts = StubShortcuts(result=hit)

        def unreachable(*args, **kwargs):
            raise AssertionError("recognition must not run on a shortcut hit")

        monkeypatch.setattr("subst_resolve.orchestrator.dispatch_recognition", unreachable)
        outcome = ConstraintResolver(shortcuts=shortcuts, tracker=RecordingTracker()).resolve_with_outcome(
            REGIONS, params("connected regions of 3", "become 4")
        )

        assert outcome.outcome == Outcome.SHORTCUT
        assert outcome.grid == hit
        assert outcome.grid is not hit
        assert shortcuts.calls == 1

    def test_wrong_shape_hit_is_a_miss(self):
        shortcuts = StubShortcuts(result=[[9]])
        outcome = ConstraintResolver(shortcuts=shortcuts, tracker=RecordingTracker()).resolve_with_outcome(
            REGIONS, params("connected regions of 3", "become 4")
        )
        assert outcome.outcome == Outcome.APPLIED
        assert outcome.grid[0] == [4, 4, 7]

    def test_raising_lookup_is_a_miss(self):
        shortcuts = StubShortcuts(error=KeyError("corrupt store"))
        outcome = ConstraintResolver(shortcuts=shortcuts, tracker=RecordingTracker()).resolve_with_outcome(
            REGIONS, params("connected regions of 3", "become 4")
        )
        assert outcome.outcome == Outcome.APPLIED


# =============================================================================
# Shape preservation
# =============================================================================


@pytest.mark.parametrize("grid, inp, out, preserve", [
    (PLUS, "3x3 block plus", "cross", True),
    (REGIONS, "connected regions of 3", "become 4", False),
    (PATH_GRID, "regions of 3 with a path to 5 within 2 steps", "recolor to 8", True),
    (PATH_GRID, "vertical lines of 3 at least 2 tall", "move right 1 step", True),
    (REGIONS, "nothing known", "", False),
])
def test_shape_preserved(grid, inp, out, preserve):
    result = ConstraintResolver(tracker=RecordingTracker()).resolve(grid, params(inp, out, preserve))
    assert grid_shape(result) == grid_shape(grid)
