"""**********************************************************************************
 * Title: puzzle.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The puzzle data model. A PuzzleDef holds the immutable board definition
 * (side length, stars per unit and the region grid); a PuzzleState pairs a
 * definition with the player's current marks. This module also carries the
 * small geometric helpers every technique detector relies on, such as
 * unit enumeration, neighbour lookup and the "provably starless" test, plus
 * the loaders that turn raw grids from the board UI into validated objects.
 **********************************************************************************"""

# --- IMPORTS ---
import logging

from starbattle_hints.constants import (
    STATE_EMPTY, STATE_STAR, STATE_SECONDARY_MARK, VALID_CELL_STATES
)


# --- ERRORS ---
class InvalidPuzzleDefinition(ValueError):
    """Raised when a region grid does not describe a valid board."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__('; '.join(self.issues) or 'Invalid puzzle definition')


class InvalidPuzzleState(ValueError):
    """Raised when a player grid cannot be paired with its definition."""


# --- GEOMETRY HELPERS ---
def neighbors8(row, col, size):
    """
    Returns the in-bounds cells touching (row, col), diagonals included.

    :param int row: The cell's row.
    :param int col: The cell's column.
    :param int size: The board side length.
    :returns: A list of (row, col) tuples.
    :rtype: list
    """
    result = []
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            nr, nc = row + dr, col + dc
            if 0 <= nr < size and 0 <= nc < size:
                result.append((nr, nc))
    return result


def is_adjacent(a, b):
    return a != b and abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1


# --- DEFINITION ---
class PuzzleDef:
    """The fixed description of a puzzle: size, stars per unit and regions."""

    def __init__(self, size, stars_per_unit, regions):
        self.size = size
        self.stars_per_unit = stars_per_unit
        self.regions = [list(row) for row in regions]
        self._region_cells = None

    def region_ids(self):
        return list(range(1, self.size + 1))

    def region_of(self, row, col):
        return self.regions[row][col]

    def region_cells(self, region_id):
        if self._region_cells is None:
            cells = {}
            for r, row in enumerate(self.regions):
                for c, region_id_at in enumerate(row):
                    cells.setdefault(region_id_at, []).append((r, c))
            self._region_cells = cells
        return list(self._region_cells.get(region_id, []))

    def __repr__(self):
        return f"PuzzleDef(size={self.size}, stars_per_unit={self.stars_per_unit})"


# --- STATE ---
class PuzzleState:
    """
    A puzzle definition plus the current mark in every cell.

    Marks use the board UI encoding: STATE_EMPTY, STATE_STAR and
    STATE_SECONDARY_MARK (a cross). Techniques only read a state; the solver
    works on clones when it needs to try a move.
    """

    def __init__(self, definition, cells=None):
        self.definition = definition
        if cells is None:
            cells = [[STATE_EMPTY] * definition.size for _ in range(definition.size)]
        self.cells = [list(row) for row in cells]

    @property
    def size(self):
        return self.definition.size

    @property
    def stars_per_unit(self):
        return self.definition.stars_per_unit

    def clone(self):
        return PuzzleState(self.definition, self.cells)

    def is_empty(self, row, col):
        return self.cells[row][col] == STATE_EMPTY

    def is_star(self, row, col):
        return self.cells[row][col] == STATE_STAR

    # --- Units ---
    def row_cells(self, row):
        return [(row, c) for c in range(self.size)]

    def col_cells(self, col):
        return [(r, col) for r in range(self.size)]

    def region_cells(self, region_id):
        return self.definition.region_cells(region_id)

    def region_of(self, row, col):
        return self.definition.region_of(row, col)

    def all_units(self):
        """Yields (area_type, area_id, cells) for every row, column and region."""
        for r in range(self.size):
            yield 'row', r, self.row_cells(r)
        for c in range(self.size):
            yield 'column', c, self.col_cells(c)
        for region_id in self.definition.region_ids():
            yield 'region', region_id, self.region_cells(region_id)

    # --- Counting ---
    def count_stars(self, cells):
        return sum(1 for r, c in cells if self.cells[r][c] == STATE_STAR)

    def empty_cells(self, cells=None):
        if cells is None:
            cells = [(r, c) for r in range(self.size) for c in range(self.size)]
        return [(r, c) for r, c in cells if self.cells[r][c] == STATE_EMPTY]

    def star_cells(self):
        return [(r, c) for r in range(self.size) for c in range(self.size)
                if self.cells[r][c] == STATE_STAR]

    def stars_needed(self, cells):
        return self.stars_per_unit - self.count_stars(cells)

    def touches_star(self, row, col):
        return any(self.cells[nr][nc] == STATE_STAR for nr, nc in neighbors8(row, col, self.size))

    def is_impossible_star_cell(self, row, col):
        """
        True when (row, col) provably cannot hold a star right now.

        A cell is starless when it is crossed, when its row, column or region
        already holds its quota, or when it touches a placed star.

        :param int row: The cell's row.
        :param int col: The cell's column.
        :returns: Whether a star there is ruled out.
        :rtype: bool
        """
        mark = self.cells[row][col]
        if mark == STATE_STAR:
            return False
        if mark == STATE_SECONDARY_MARK:
            return True
        k = self.stars_per_unit
        if self.count_stars(self.row_cells(row)) >= k:
            return True
        if self.count_stars(self.col_cells(col)) >= k:
            return True
        if self.count_stars(self.region_cells(self.region_of(row, col))) >= k:
            return True
        return self.touches_star(row, col)

    def viable_cells(self, cells):
        """Empty cells of `cells` that can still take a star."""
        return [(r, c) for r, c in cells
                if self.cells[r][c] == STATE_EMPTY and not self.is_impossible_star_cell(r, c)]

    def __repr__(self):
        rows = [''.join('*' if v == STATE_STAR else 'x' if v == STATE_SECONDARY_MARK else '.'
                        for v in row) for row in self.cells]
        return 'PuzzleState(\n  ' + '\n  '.join(rows) + '\n)'


# --- LOADERS ---
def load_puzzle_def(regions, stars_per_unit):
    """
    Builds a PuzzleDef from a raw region grid after structural validation.

    :param list regions: A square grid of region ids in [1, size].
    :param int stars_per_unit: Stars required per row, column and region.
    :returns: The validated definition.
    :rtype: PuzzleDef
    :raises InvalidPuzzleDefinition: If the grid does not partition the board.
    """
    # validation imports this module
    from starbattle_hints.validation import validate_regions

    size = len(regions) if regions is not None else 0
    definition = PuzzleDef(size, stars_per_unit, regions or [])
    issues = validate_regions(definition)
    if issues:
        logging.warning(f"Rejected puzzle definition with {len(issues)} issue(s): {issues[0]}")
        raise InvalidPuzzleDefinition(issues)
    return definition


def load_puzzle_state(definition, player_grid=None):
    """
    Pairs a definition with a player grid, checking its shape and marks.

    :param PuzzleDef definition: A definition accepted by load_puzzle_def.
    :param list player_grid: Rows of cell marks, or None for an empty board.
    :returns: A new PuzzleState.
    :rtype: PuzzleState
    :raises InvalidPuzzleState: If the grid has the wrong shape or unknown marks.
    """
    if player_grid is None:
        return PuzzleState(definition)
    size = definition.size
    if len(player_grid) != size or any(len(row) != size for row in player_grid):
        raise InvalidPuzzleState(f"Player grid must be {size}x{size}")
    for r, row in enumerate(player_grid):
        for c, value in enumerate(row):
            if value not in VALID_CELL_STATES:
                raise InvalidPuzzleState(f"Unknown mark {value!r} at ({r},{c})")
    return PuzzleState(definition, player_grid)
