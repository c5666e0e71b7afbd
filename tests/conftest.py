# tests/conftest.py
# Shared board builders for the hint engine tests.

import random

import pytest

from starbattle_hints.constants import STATE_STAR, STATE_SECONDARY_MARK
from starbattle_hints.n_rooks import block_cells
from starbattle_hints.puzzle import PuzzleDef, PuzzleState

S, X = STATE_STAR, STATE_SECONDARY_MARK


def row_regions(size):
    """Region grid where region r + 1 is row r."""
    return [[r + 1] * size for r in range(size)]


def build_state(regions, stars_per_unit, marks=None):
    definition = PuzzleDef(len(regions), stars_per_unit, regions)
    state = PuzzleState(definition)
    for (r, c), mark in (marks or {}).items():
        state.cells[r][c] = mark
    return state


def crossed_blocks(*blocks):
    """Crosses every cell of the given 2x2 blocks (block-grid coordinates)."""
    marks = {}
    for b_row, b_col in blocks:
        for cell in block_cells(b_row, b_col):
            marks[cell] = X
    return marks


def two_star_solution():
    """A valid 10x10 two-star placement: row r has stars at 3r and 3r + 5 (mod 10)."""
    return sorted({(r, (3 * r) % 10) for r in range(10)} | {(r, (3 * r + 5) % 10) for r in range(10)})


def one_star_solution(size, rng):
    """A random one-star placement with no touching stars."""
    while True:
        cols = list(range(size))
        rng.shuffle(cols)
        if all(abs(cols[i] - cols[i + 1]) > 1 for i in range(size - 1)):
            return [(r, cols[r]) for r in range(size)]


def grow_regions(size, seeds, rng):
    """
    Grows one region per seed group by random flood fill.

    Each region starts from its own seed cells, so it ends up holding
    exactly those solution stars and the puzzle stays solvable.
    """
    regions = [[0] * size for _ in range(size)]
    for region_id, cells in enumerate(seeds, start=1):
        for r, c in cells:
            regions[r][c] = region_id
    while any(0 in row for row in regions):
        frontier = []
        for r in range(size):
            for c in range(size):
                if regions[r][c]:
                    continue
                for dr, dc in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                    nr, nc = r + dr, c + dc
                    if 0 <= nr < size and 0 <= nc < size and regions[nr][nc]:
                        frontier.append((r, c, regions[nr][nc]))
        r, c, region_id = rng.choice(frontier)
        regions[r][c] = region_id
    return regions


def random_one_star_puzzle(size, seed):
    rng = random.Random(seed)
    stars = one_star_solution(size, rng)
    return grow_regions(size, [[cell] for cell in stars], rng), stars


def random_two_star_puzzle(seed):
    rng = random.Random(seed)
    stars = two_star_solution()
    rng.shuffle(stars)
    return grow_regions(10, [stars[i:i + 2] for i in range(0, 20, 2)], rng), stars


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def empty_ten_by_ten():
    return build_state(row_regions(10), 2)


@pytest.fixture
def solved_ten_by_ten():
    stars = set(two_star_solution())
    marks = {(r, c): (S if (r, c) in stars else X) for r in range(10) for c in range(10)}
    return build_state(row_regions(10), 2, marks)
