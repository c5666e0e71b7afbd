import logging

from conftest import S, X, build_state, crossed_blocks, row_regions
from starbattle_hints.constants import (
    MARK_STAR, MARK_CROSS, TECH_N_ROOKS, TECH_SQUARE_COUNTING, TECH_TWO_BY_TWO,
    HINT_PLACE_STAR, HINT_PLACE_CROSS
)
from starbattle_hints.deductions import (
    AreaDeduction, AreaRelationDeduction, AreaSpec, BlockDeduction, CellDeduction,
    ExclusiveSetDeduction
)
from starbattle_hints.deduction_utils import merge_deductions
from starbattle_hints.n_rooks import find_n_rooks
from starbattle_hints.solver import (
    analyze_deductions, apply_hint, resolve_cross_constraints, resolve_exclusive_sets, solve
)
from starbattle_hints.technique_registry import Technique, collect_deductions
from starbattle_hints.validation import validate_state


def star(cell, technique='t'):
    return CellDeduction(cell=cell, mark=MARK_STAR, technique=technique)


def cross(cell, technique='t'):
    return CellDeduction(cell=cell, mark=MARK_CROSS, technique=technique)


class TestCellResolution:
    def test_n_rooks_pair_becomes_one_star_hint(self):
        marks = {(3, 0): S, (9, 7): S}
        marks.update({(3, c): X for c in range(1, 10) if c != 5})
        marks.update({(r, 7): X for r in range(9) if r not in (3, 6)})
        state = build_state(row_regions(10), 2, marks)
        hint = analyze_deductions([star((3, 5), TECH_N_ROOKS), star((6, 7), TECH_N_ROOKS)], state)
        assert hint.kind == HINT_PLACE_STAR
        assert hint.technique == TECH_N_ROOKS
        assert sorted(hint.result_cells) == [(3, 5), (6, 7)]
        assert hint.details['techniques'] == [TECH_N_ROOKS]
        assert hint.details['strategy'] == 'cell'
        assert hint.details['deductions_considered'] == 2

    def test_single_cell_keeps_its_technique(self):
        state = build_state(row_regions(5), 1)
        hint = analyze_deductions([cross((2, 2), 'trivial-marks')], state)
        assert hint.kind == HINT_PLACE_CROSS
        assert hint.technique == 'trivial-marks'
        assert hint.result_cells == [(2, 2)]
        assert hint.schema_cell_types is None

    def test_mixed_bundle_carries_cell_types(self):
        state = build_state(row_regions(5), 1)
        hint = analyze_deductions([cross((4, 4), 'a'), star((0, 0), 'b')], state)
        assert hint.result_cells == [(0, 0), (4, 4)]
        assert hint.schema_cell_types == {(0, 0): 'star', (4, 4): 'cross'}
        assert hint.details['techniques'] == ['b', 'a']

    def test_bundle_is_capped(self):
        state = build_state(row_regions(6), 1)
        deductions = [cross((r, c)) for r in range(6) for c in range(6)]
        assert len(analyze_deductions(deductions, state).result_cells) == 10

    def test_conflict_returns_none(self, caplog):
        state = build_state(row_regions(5), 1)
        merged = merge_deductions([star((1, 1))], [cross((1, 1))])
        with caplog.at_level(logging.ERROR):
            assert analyze_deductions(merged, state) is None
        assert 'Solver inconsistency' in caplog.text

    def test_rejected_bundle_falls_back_to_single_cells(self):
        state = build_state(row_regions(5), 2)
        hint = analyze_deductions([star((0, 0)), star((0, 1))], state)
        assert hint.result_cells == [(0, 0)]

    def test_rejected_cell_moves_on_to_weaker_strategies(self):
        state = build_state(row_regions(5), 1, {(0, 0): S})
        area = AreaDeduction(area_type='row', area_id=2, candidate_cells=((2, 3),),
                             technique='area-tech', stars_required=1)
        hint = analyze_deductions([star((1, 1)), area], state)
        assert hint.technique == 'area-tech'
        assert hint.result_cells == [(2, 3)]


class TestOtherStrategies:
    def test_area_with_no_room_is_crossed(self):
        state = build_state(row_regions(5), 1)
        area = AreaDeduction(area_type='column', area_id=1, candidate_cells=((0, 1), (4, 1)),
                             technique='t', max_stars=0)
        hint = analyze_deductions([area], state)
        assert hint.kind == HINT_PLACE_CROSS
        assert hint.result_cells == [(0, 1), (4, 1)]
        assert hint.highlights['cols'] == [1]

    def test_full_block_crosses_the_rest(self):
        state = build_state(row_regions(4), 1, {(0, 0): S})
        block = BlockDeduction(block=(0, 0), technique=TECH_TWO_BY_TWO, max_stars=1)
        hint = analyze_deductions([block], state)
        assert hint.details['strategy'] == 'block'
        assert sorted(hint.result_cells) == [(0, 1), (1, 0), (1, 1)]

    def test_block_needing_one_star_places_it(self):
        state = build_state(row_regions(6), 1, {(2, 3): X, (3, 2): X, (3, 3): X})
        block = BlockDeduction(block=(2, 2), technique=TECH_SQUARE_COUNTING,
                               stars_required=1, min_stars=1, max_stars=1)
        hint = analyze_deductions([block], state)
        assert hint.kind == HINT_PLACE_STAR
        assert hint.technique == TECH_SQUARE_COUNTING
        assert hint.result_cells == [(2, 2)]
        assert hint.details['strategy'] == 'block'

    def test_block_lower_bound_alone_places_a_star(self):
        state = build_state(row_regions(6), 1, {(2, 3): X, (3, 2): X, (3, 3): X})
        block = BlockDeduction(block=(2, 2), technique=TECH_SQUARE_COUNTING, min_stars=1)
        hint = analyze_deductions([block], state)
        assert hint.kind == HINT_PLACE_STAR
        assert hint.result_cells == [(2, 2)]
        assert hint.details['strategy'] == 'block'
        assert 'at least one more star' in hint.explanation

    def test_exclusive_set_with_one_cell_left(self):
        state = build_state(row_regions(5), 1, {(0, 0): X})
        ex = ExclusiveSetDeduction(cells=((0, 0), (0, 3)), stars_required=1, technique='t')
        hint = analyze_deductions([ex], state)
        assert hint.details['strategy'] == 'exclusive-set'
        assert hint.result_cells == [(0, 3)]

    def test_satisfied_exclusive_set_gives_nothing(self):
        state = build_state(row_regions(5), 1, {(0, 0): S})
        ex = ExclusiveSetDeduction(cells=((0, 0), (0, 3)), stars_required=1, technique='t')
        assert list(resolve_exclusive_sets([ex], state)) == []
        assert analyze_deductions([ex], state) is None

    def test_bounds_fill_every_candidate(self):
        state = build_state(row_regions(6), 2)
        area = AreaDeduction(area_type='row', area_id=0, candidate_cells=((0, 1), (0, 4)),
                             technique='t', min_stars=2, max_stars=2)
        hint = analyze_deductions([area], state)
        assert hint.details['strategy'] == 'bounds'
        assert hint.result_cells == [(0, 1), (0, 4)]

    def test_area_relation_with_one_candidate(self):
        state = build_state(row_regions(5), 1, {(0, 0): S})
        relation = AreaRelationDeduction(
            areas=(AreaSpec('row', 0, ()), AreaSpec('row', 1, ((1, 3),))),
            total_stars=2, technique='t')
        hint = analyze_deductions([relation], state)
        assert hint.details['strategy'] == 'area-relation'
        assert hint.result_cells == [(1, 3)]

    def test_cross_constraint_inside_an_area(self):
        state = build_state(row_regions(5), 1)
        area = AreaDeduction(area_type='row', area_id=2,
                             candidate_cells=((2, 0), (2, 2), (2, 4)), technique='t')
        ex = ExclusiveSetDeduction(cells=((2, 2),), stars_required=1, technique='ex')
        hints = list(resolve_cross_constraints([area, ex], state))
        assert [h.result_cells for h in hints] == [[(2, 2)]]
        assert hints[0].technique == 'ex'


class TestSolve:
    def test_finished_board_gives_no_hint(self, solved_ten_by_ten):
        assert solve(solved_ten_by_ten) is None

    def test_hint_ids_increase(self):
        state = build_state(row_regions(5), 1, {(2, 2): S})
        first, second = solve(state), solve(state)
        assert first.id.startswith('hint-')
        assert first.id != second.id
        assert int(second.id.split('-')[-1]) > int(first.id.split('-')[-1])

    def test_solve_does_not_touch_the_state(self):
        state = build_state(row_regions(5), 1, {(2, 2): S})
        before = [list(row) for row in state.cells]
        hint = solve(state)
        assert state.cells == before
        after = apply_hint(state, hint)
        assert after.cells != before
        assert validate_state(after) == []

    def test_hint_serialises_for_json(self):
        state = build_state(row_regions(5), 1, {(2, 2): S})
        data = solve(state).to_dict()
        assert set(data) >= {'id', 'kind', 'technique', 'resultCells', 'explanation', 'details'}
        assert all(isinstance(cell, list) for cell in data['resultCells'])

    def test_n_rooks_block_end_to_end(self):
        state = build_state(row_regions(10), 2, crossed_blocks((1, 1), (2, 2), (3, 3), (4, 4)))
        hint = solve(state)
        assert hint.technique == TECH_N_ROOKS
        assert hint.kind == HINT_PLACE_CROSS
        assert sorted(hint.result_cells) == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert hint.details['techniques'] == [TECH_N_ROOKS]
        assert hint.details['strategy'] == 'cell'


class TestCollectDeductions:
    def test_detector_hint_is_lowered_to_cell_deductions(self):
        state = build_state(row_regions(10), 2, crossed_blocks((1, 1), (2, 2), (3, 3), (4, 4)))
        deductions = collect_deductions(state, [Technique(TECH_N_ROOKS, 'N-Rooks', find_n_rooks)])
        assert all(isinstance(d, CellDeduction) for d in deductions)
        assert sorted((d.cell, d.mark) for d in deductions) == [
            ((0, 0), MARK_CROSS), ((0, 1), MARK_CROSS), ((1, 0), MARK_CROSS), ((1, 1), MARK_CROSS)
        ]
        assert {d.technique for d in deductions} == {TECH_N_ROOKS}
        assert all('N-Rooks' in d.explanation for d in deductions)

    def test_detectors_with_nothing_to_say(self, empty_ten_by_ten):
        technique = Technique(TECH_N_ROOKS, 'N-Rooks', find_n_rooks)
        assert collect_deductions(empty_ten_by_ten, [technique]) == []
