"""**********************************************************************************
 * Title: z3_solver.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * An exact pseudo-boolean model of a Star Battle board built on the Z3 SMT
 * solver. It is an oracle for checking hints after the fact: it counts
 * solutions that agree with the player's marks, reports which empty cells
 * are fixed in every such solution, and tells whether a given hint is
 * logically forced. The deduction engine never consults it.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import time
from collections import defaultdict

from z3 import Solver, Bool, PbEq, Implies, And, Not, Or, sat

from starbattle_hints.constants import STATE_STAR, STATE_SECONDARY_MARK, MARK_STAR
from starbattle_hints.puzzle import neighbors8


def format_duration(seconds):
    if seconds >= 60:
        return f"{int(seconds // 60)} min {seconds % 60:.2f} s"
    if seconds >= 1:
        return f"{seconds:.3f} s"
    return f"{seconds * 1000:.2f} ms"


class Z3StarBattleSolver:
    """
    Exact solver for one region grid.

    :param list region_grid: Square grid of region ids.
    :param int stars_per_region: Stars per row, column and region.
    """

    def __init__(self, region_grid, stars_per_region):
        self.region_grid, self.dim, self.stars_per_region = region_grid, len(region_grid), stars_per_region
        self.grid_vars = [[Bool(f"c_{r}_{c}") for c in range(self.dim)] for r in range(self.dim)]

    # --- Model ---
    def _base_solver(self, player_grid=None):
        s = Solver()
        v = self.grid_vars
        # Rule: N stars per row and column
        for i in range(self.dim):
            s.add(PbEq([(v[i][c], 1) for c in range(self.dim)], self.stars_per_region))
            s.add(PbEq([(v[r][i], 1) for r in range(self.dim)], self.stars_per_region))
        # Rule: N stars per region
        regions = defaultdict(list)
        for r in range(self.dim):
            for c in range(self.dim):
                regions[self.region_grid[r][c]].append(v[r][c])
        for r_vars in regions.values():
            s.add(PbEq([(var, 1) for var in r_vars], self.stars_per_region))
        # Rule: Stars cannot be adjacent
        for r in range(self.dim):
            for c in range(self.dim):
                neighbors = [Not(v[nr][nc]) for nr, nc in neighbors8(r, c, self.dim)]
                if neighbors:
                    s.add(Implies(v[r][c], And(neighbors)))
        # Rule: respect the player's marks
        if player_grid is not None:
            for r, row in enumerate(player_grid):
                for c, mark in enumerate(row):
                    if mark == STATE_STAR:
                        s.add(v[r][c])
                    elif mark == STATE_SECONDARY_MARK:
                        s.add(Not(v[r][c]))
        return s

    def _read_model(self, model):
        return [[(1 if model.evaluate(self.grid_vars[r][c]) else 0) for c in range(self.dim)]
                for r in range(self.dim)]

    def _block(self, solution):
        return Or([Not(v) if solution[r][c] else v
                   for r, row in enumerate(self.grid_vars) for c, v in enumerate(row)])

    # --- Queries ---
    def solve(self, player_grid=None, limit=2):
        """
        Finds up to `limit` solutions consistent with `player_grid`.

        :returns: A list of 0/1 star grids.
        :rtype: list
        """
        s = self._base_solver(player_grid)
        solutions, start_time = [], time.monotonic()
        while len(solutions) < limit and s.check() == sat:
            solution = self._read_model(s.model())
            solutions.append(solution)
            # Block this solution and check for another
            s.add(self._block(solution))
        logging.info(f"Z3 found {len(solutions)} solution(s) in {format_duration(time.monotonic() - start_time)}")
        return solutions

    def is_forced(self, player_grid, cell, star):
        """True when every solution agreeing with `player_grid` has `cell` as given."""
        s = self._base_solver(player_grid)
        if s.check() != sat:
            return False
        r, c = cell
        s.add(Not(self.grid_vars[r][c]) if star else self.grid_vars[r][c])
        return s.check() != sat

    def forced_cells(self, player_grid):
        """
        Lists empty cells fixed in every consistent solution.

        :returns: Two lists of (row, col): forced stars and forced crosses.
        :rtype: tuple
        """
        stars, crosses = [], []
        for r, row in enumerate(player_grid):
            for c, mark in enumerate(row):
                if mark in (STATE_STAR, STATE_SECONDARY_MARK):
                    continue
                if self.is_forced(player_grid, (r, c), True):
                    stars.append((r, c))
                elif self.is_forced(player_grid, (r, c), False):
                    crosses.append((r, c))
        return stars, crosses

    def verify_hint(self, player_grid, hint):
        """True when every cell of `hint` is forced to the mark it carries."""
        for cell in hint.result_cells:
            star = hint.mark_for(tuple(cell)) == MARK_STAR
            if not self.is_forced(player_grid, tuple(cell), star):
                logging.warning(f"Hint {hint.id} ({hint.technique}) is not forced at {tuple(cell)}")
                return False
        return True
