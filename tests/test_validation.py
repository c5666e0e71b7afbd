import pytest

from conftest import S, X, build_state, row_regions
from starbattle_hints.constants import HINT_PLACE_STAR, HINT_PLACE_CROSS
from starbattle_hints.deductions import make_hint
from starbattle_hints.puzzle import (
    InvalidPuzzleDefinition, InvalidPuzzleState, PuzzleDef, load_puzzle_def, load_puzzle_state
)
from starbattle_hints.validation import (
    is_hint_consistent, is_puzzle_complete, rule_violations, validate_regions, validate_state
)


class TestValidateRegions:
    def test_accepts_exact_partition(self):
        assert validate_regions(PuzzleDef(4, 1, row_regions(4))) == []

    def test_rejects_out_of_range_id(self):
        regions = row_regions(4)
        regions[0][0] = 5
        issues = validate_regions(PuzzleDef(4, 1, regions))
        assert any('outside 1..4' in issue for issue in issues)

    def test_rejects_unused_region(self):
        regions = row_regions(4)
        regions[3] = [3, 3, 3, 3]
        assert validate_regions(PuzzleDef(4, 1, regions)) == ["Region 4 has no cells."]

    def test_rejects_ragged_grid(self):
        issues = validate_regions(PuzzleDef(2, 1, [[1, 2], [1]]))
        assert issues == ["Region grid must be 2x2."]

    def test_rejects_empty_board(self):
        assert validate_regions(PuzzleDef(0, 1, [])) == ["Board size must be at least 1 (got 0)."]

    def test_rejects_non_positive_stars(self):
        issues = validate_regions(PuzzleDef(2, 0, [[1, 1], [2, 2]]))
        assert any('Stars per unit' in issue for issue in issues)

    def test_load_puzzle_def_raises_with_issues(self):
        with pytest.raises(InvalidPuzzleDefinition) as exc:
            load_puzzle_def([[1, 1], [1, 1]], 1)
        assert "Region 2 has no cells." in exc.value.issues

    def test_load_puzzle_def_accepts_valid_grid(self):
        definition = load_puzzle_def(row_regions(5), 1)
        assert definition.size == 5
        assert definition.region_cells(3) == [(2, c) for c in range(5)]


class TestLoadPuzzleState:
    def test_rejects_wrong_shape(self):
        definition = load_puzzle_def(row_regions(3), 1)
        with pytest.raises(InvalidPuzzleState):
            load_puzzle_state(definition, [[0, 0, 0], [0, 0, 0]])

    def test_rejects_unknown_mark(self):
        definition = load_puzzle_def(row_regions(2), 1)
        with pytest.raises(InvalidPuzzleState):
            load_puzzle_state(definition, [[0, 7], [0, 0]])

    def test_defaults_to_empty_board(self):
        state = load_puzzle_state(load_puzzle_def(row_regions(3), 1))
        assert state.empty_cells() == [(r, c) for r in range(3) for c in range(3)]


class TestValidateState:
    def test_clean_board_has_no_violations(self):
        state = build_state(row_regions(4), 1, {(0, 0): S, (1, 2): S})
        assert validate_state(state) == []

    def test_overfull_row_and_region(self):
        state = build_state(row_regions(4), 1, {(0, 0): S, (0, 2): S})
        assert validate_state(state) == [
            "Row 1 has 2 stars (maximum is 1).",
            "Region 1 has 2 stars (maximum is 1).",
        ]

    def test_overfull_column(self):
        state = build_state(row_regions(4), 1, {(0, 1): S, (2, 1): S})
        assert validate_state(state) == ["Column 2 has 2 stars (maximum is 1)."]

    def test_touching_stars_reported_once(self):
        state = build_state(row_regions(4), 2, {(0, 0): S, (1, 1): S})
        messages = validate_state(state)
        assert messages.count("Two stars touch at (0,0) and (1,1).") == 1


class TestCompletion:
    def test_solved_board_is_complete(self, solved_ten_by_ten):
        assert is_puzzle_complete(solved_ten_by_ten)

    def test_one_empty_cell_is_not_complete(self, solved_ten_by_ten):
        state = solved_ten_by_ten.clone()
        r, c = next((r, c) for r in range(10) for c in range(10) if state.cells[r][c] == X)
        state.cells[r][c] = 0
        assert not is_puzzle_complete(state)

    def test_rule_violations_flags_unfillable_units(self, make_state):
        state = make_state(row_regions(3), 1, {(0, 0): X, (0, 1): X, (0, 2): X})
        assert any('cannot fit' in message for message in rule_violations(state))


class TestHintConsistency:
    def test_accepts_legal_star(self):
        state = build_state(row_regions(4), 1, {(0, 0): S})
        hint = make_hint(HINT_PLACE_STAR, 'test', [(1, 2)], 'legal')
        assert is_hint_consistent(state, hint)

    def test_rejects_star_touching_star(self):
        state = build_state(row_regions(4), 1, {(0, 0): S})
        hint = make_hint(HINT_PLACE_STAR, 'test', [(1, 1)], 'touches')
        assert not is_hint_consistent(state, hint)

    def test_rejects_overwriting_a_different_mark(self):
        state = build_state(row_regions(4), 1, {(2, 2): X})
        hint = make_hint(HINT_PLACE_STAR, 'test', [(2, 2)], 'overwrite')
        assert not is_hint_consistent(state, hint)

    def test_mixed_hint_uses_schema_types(self):
        state = build_state(row_regions(4), 1)
        hint = make_hint(HINT_PLACE_STAR, 'test', [(0, 0), (0, 1)], 'mixed',
                         schema_cell_types={(0, 0): 'star', (0, 1): 'cross'})
        assert is_hint_consistent(state, hint)
        cross_only = make_hint(HINT_PLACE_CROSS, 'test', [(0, 0), (0, 1)], 'crosses')
        assert is_hint_consistent(state, cross_only)
