# Checks every hint the engine gives against the exact Z3 model.

import pytest

from conftest import S, build_state, random_one_star_puzzle, random_two_star_puzzle, row_regions
from starbattle_hints.solver import apply_hint, solve
from starbattle_hints.validation import validate_state
from starbattle_hints.z3_solver import Z3StarBattleSolver


def walk_hints(state, oracle, max_steps):
    """Applies hints until none is left, verifying each one first."""
    steps = 0
    while steps < max_steps:
        hint = solve(state)
        if hint is None:
            break
        assert oracle.verify_hint(state.cells, hint), hint.explanation
        state = apply_hint(state, hint)
        assert validate_state(state) == []
        steps += 1
    return state, steps


class TestOracle:
    def test_finds_the_known_solution(self, solved_ten_by_ten):
        oracle = Z3StarBattleSolver(row_regions(10), 2)
        solutions = oracle.solve(solved_ten_by_ten.cells)
        expected = [[1 if v == S else 0 for v in row] for row in solved_ten_by_ten.cells]
        assert solutions == [expected]

    def test_forced_cells_on_a_nearly_solved_board(self, solved_ten_by_ten):
        state = solved_ten_by_ten.clone()
        state.cells[0][0] = 0
        state.cells[0][1] = 0
        oracle = Z3StarBattleSolver(row_regions(10), 2)
        stars, crosses = oracle.forced_cells(state.cells)
        assert stars == [(0, 0)]
        assert crosses == [(0, 1)]


class TestHintSoundness:
    @pytest.mark.parametrize('seed', range(4))
    def test_one_star_hints_are_forced(self, seed):
        regions, _ = random_one_star_puzzle(6, seed)
        state = build_state(regions, 1)
        walk_hints(state, Z3StarBattleSolver(regions, 1), max_steps=36)

    @pytest.mark.parametrize('seed', range(2))
    def test_two_star_hints_are_forced(self, seed):
        regions, stars = random_two_star_puzzle(seed)
        # two solution stars as the starting position
        state = build_state(regions, 2, {stars[0]: S, stars[1]: S})
        walk_hints(state, Z3StarBattleSolver(regions, 2), max_steps=40)

    def test_engine_progresses_on_a_seeded_board(self):
        regions, stars = random_one_star_puzzle(6, 11)
        state = build_state(regions, 1, {stars[0]: S})
        _, steps = walk_hints(state, Z3StarBattleSolver(regions, 1), max_steps=36)
        assert steps > 0
