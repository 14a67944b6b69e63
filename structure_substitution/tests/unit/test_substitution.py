"""
Unit tests for subst_apply (operators, apply_substitution, legacy rewrite).

- Baseline policy: copy vs cleared grid, shape always preserved
- Each registered operator rewrites exactly its write region
- Unknown operators leave instances at baseline
- Overlapping write regions resolve last-write-wins
- Legacy plus→cross on the canonical 3×3 case
"""

import copy

import pytest

from subst_apply.legacy import legacy_pattern_matches, replace_plus_with_cross
from subst_apply.operators import OPERATORS, register_operator
from subst_apply.substitution import apply_substitution
from subst_core.components import make_structure
from subst_core.grid import copy_grid, zeros_like
from subst_core.types import Pixel, SubstitutionRule

GRID = [
    [1, 1, 0],
    [1, 1, 0],
    [0, 0, 5],
]

BLOCK = make_structure([Pixel(0, 0), Pixel(0, 1), Pixel(1, 0), Pixel(1, 1)], 1, "block")


def rule(operator, **params):
    return SubstitutionRule(operator=operator, params=params)


# =============================================================================
# Baseline policy
# =============================================================================


class TestBaseline:

    def test_recolor_preserving(self):
        result = apply_substitution(GRID, [BLOCK], rule("recolor", value=3))
        assert result == [
            [3, 3, 0],
            [3, 3, 0],
            [0, 0, 5],
        ]

    def test_recolor_not_preserving(self):
        result = apply_substitution(GRID, [BLOCK], rule("recolor", value=3), preserve_non_matching=False)
        assert result == [
            [3, 3, 0],
            [3, 3, 0],
            [0, 0, 0],
        ]

    def test_input_not_mutated(self):
        before = copy.deepcopy(GRID)
        result = apply_substitution(GRID, [BLOCK], rule("clear"))
        assert GRID == before
        assert result is not GRID

    def test_unknown_operator_preserving(self):
        result = apply_substitution(GRID, [BLOCK], rule("noSuchOperator"))
        assert result == GRID
        assert result is not GRID

    def test_unknown_operator_cleared(self):
        result = apply_substitution(GRID, [BLOCK], rule("generic"), preserve_non_matching=False)
        assert result == zeros_like(GRID)

    def test_no_instances(self):
        assert apply_substitution(GRID, [], rule("recolor", value=9)) == GRID


# =============================================================================
# Operators
# =============================================================================


class TestOperators:

    def test_keep_on_cleared_baseline(self):
        result = apply_substitution(GRID, [BLOCK], rule("keep"), preserve_non_matching=False)
        assert result == [
            [1, 1, 0],
            [1, 1, 0],
            [0, 0, 0],
        ]

    def test_recolor_without_value_keeps(self):
        result = apply_substitution(GRID, [BLOCK], rule("recolor"), preserve_non_matching=False)
        assert result[0][0] == 1

    def test_clear(self):
        result = apply_substitution(GRID, [BLOCK], rule("clear"))
        assert result == [
            [0, 0, 0],
            [0, 0, 0],
            [0, 0, 5],
        ]

    def test_extract_by_boundary(self):
        grid = [[4] * 3 for _ in range(3)]
        square = make_structure([Pixel(r, c) for r in range(3) for c in range(3)], 4, "block")

        assert apply_substitution(grid, [square], rule("extractByBoundary")) == [
            [4, 4, 4],
            [4, 0, 4],
            [4, 4, 4],
        ]
        assert apply_substitution(grid, [square], rule("extractByBoundary", value=2)) == [
            [2, 2, 2],
            [2, 0, 2],
            [2, 2, 2],
        ]

    def test_fill_bounding_box(self):
        grid = [
            [1, 0, 0],
            [1, 1, 0],
        ]
        ell = make_structure([Pixel(0, 0), Pixel(1, 0), Pixel(1, 1)], 1, "region")

        assert apply_substitution(grid, [ell], rule("fillBoundingBox", value=7)) == [
            [7, 7, 0],
            [7, 7, 0],
        ]
        assert apply_substitution(grid, [ell], rule("fillBoundingBox")) == [
            [1, 1, 0],
            [1, 1, 0],
        ]

    def test_clear_bounding_box(self):
        grid = [
            [1, 6, 9],
            [1, 1, 9],
        ]
        ell = make_structure([Pixel(0, 0), Pixel(1, 0), Pixel(1, 1)], 1, "region")
        assert apply_substitution(grid, [ell], rule("clearBoundingBox")) == [
            [0, 0, 9],
            [0, 0, 9],
        ]

    def test_shift_fixed_steps(self):
        grid = [
            [2, 0],
            [0, 0],
            [0, 0],
        ]
        cell = make_structure([Pixel(0, 0)], 2, "cell")
        assert apply_substitution(grid, [cell], rule("shift", direction=[1, 0], steps=1)) == [
            [0, 0],
            [2, 0],
            [0, 0],
        ]

    def test_shift_off_grid_drops_cells(self):
        grid = [[0, 2]]
        cell = make_structure([Pixel(0, 1)], 2, "cell")
        assert apply_substitution(grid, [cell], rule("shift", direction=[0, 1], steps=1)) == [[0, 0]]

    def test_shift_until_blocked(self):
        grid = [
            [2, 0],
            [0, 0],
            [0, 0],
            [5, 0],
        ]
        cell = make_structure([Pixel(0, 0)], 2, "cell")
        assert apply_substitution(grid, [cell], rule("shift", direction=[1, 0], until_blocked=True)) == [
            [0, 0],
            [0, 0],
            [2, 0],
            [5, 0],
        ]

    def test_shift_blocked_immediately(self):
        grid = [
            [2, 0],
            [5, 0],
        ]
        cell = make_structure([Pixel(0, 0)], 2, "cell")
        assert apply_substitution(grid, [cell], rule("shift", direction=[1, 0], until_blocked=True)) == grid

    def test_vertical_bar_slides_as_unit(self):
        grid = [
            [3, 0],
            [3, 0],
            [0, 0],
        ]
        bar = make_structure([Pixel(0, 0), Pixel(1, 0)], 3, "column_run")
        assert apply_substitution(grid, [bar], rule("shift", direction=[1, 0], until_blocked=True)) == [
            [0, 0],
            [3, 0],
            [3, 0],
        ]

    def test_registry_contains_operators(self):
        for name in ("keep", "recolor", "clear", "extractByBoundary", "fillBoundingBox", "clearBoundingBox", "shift"):
            assert name in OPERATORS

    def test_register_operator(self, monkeypatch):
        monkeypatch.setattr("subst_apply.operators.OPERATORS", dict(OPERATORS))

        @register_operator("invert")
        def invert(result, grid, instance, rule, background):
            for p in instance.cells:
                result[p.row][p.col] = 9 - grid[p.row][p.col]

        assert apply_substitution([[1]], [make_structure([Pixel(0, 0)], 1, "cell")], rule("invert")) == [[8]]


class TestOverlap:
    """Bounding-box writes overlap: the later instance wins."""

    GRID = [
        [1, 2],
        [2, 1],
    ]
    A = make_structure([Pixel(0, 0), Pixel(1, 1)], 1, "region")
    B = make_structure([Pixel(0, 1), Pixel(1, 0)], 2, "region")

    def test_last_write_wins(self):
        assert apply_substitution(self.GRID, [self.A, self.B], rule("fillBoundingBox")) == [[2, 2], [2, 2]]
        assert apply_substitution(self.GRID, [self.B, self.A], rule("fillBoundingBox")) == [[1, 1], [1, 1]]


# =============================================================================
# Legacy plus→cross
# =============================================================================


class TestLegacy:

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

    @pytest.mark.parametrize("preserve", [True, False])
    def test_canonical_case(self, preserve):
        baseline = copy_grid(self.PLUS) if preserve else zeros_like(self.PLUS)
        assert replace_plus_with_cross(self.PLUS, baseline) == self.CROSS

    def test_outside_cells_follow_baseline(self):
        grid = [
            [1, 1, 1, 7],
            [1, 0, 1, 7],
            [1, 1, 1, 7],
        ]
        assert replace_plus_with_cross(grid, copy_grid(grid)) == [
            [0, 2, 0, 7],
            [2, 2, 2, 7],
            [0, 2, 0, 7],
        ]

    def test_two_blocks(self):
        grid = [
            [1, 1, 1, 1, 1, 1],
            [1, 0, 1, 1, 0, 1],
            [1, 1, 1, 1, 1, 1],
        ]
        result = replace_plus_with_cross(grid, copy_grid(grid))
        assert result == [
            [0, 2, 0, 0, 2, 0],
            [2, 2, 2, 2, 2, 2],
            [0, 2, 0, 0, 2, 0],
        ]

    def test_no_match_unchanged(self):
        grid = [
            [1, 1, 1],
            [1, 0, 1],
            [1, 1, 3],
        ]
        assert replace_plus_with_cross(grid, copy_grid(grid)) == grid

    def test_too_small(self):
        assert replace_plus_with_cross([[0, 1]], [[0, 1]]) == [[0, 1]]

    @pytest.mark.parametrize("inp, out, expected", [
        ("3x3 block of 1s", "cross of 2s", True),
        ("plus shape", "2 at the center", True),
        ("cardinal pattern", "CROSS", True),
        ("regions of 4", "cross", False),
        ("3x3 block", "recolor to 5", False),
        (None, "cross", False),
        ("plus", None, False),
        (["plus", "block"], ["cross"], True),
        (("3x3", "block"), ("recolor", 5), False),
    ])
    def test_pattern_match(self, inp, out, expected):
        assert legacy_pattern_matches(inp, out) is expected
