"""**********************************************************************************
 * Title: the_m.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * "The M": a region whose top edge rises to two peaks around a lower valley
 * column. Counting the region's viable cells against the stars it still
 * needs either fills every viable cell with a star or rules out cells whose
 * star would block too many of the others.
 **********************************************************************************"""

# --- IMPORTS ---
from starbattle_hints.constants import TECH_THE_M, HINT_PLACE_STAR, HINT_PLACE_CROSS
from starbattle_hints.deductions import TechniqueResult, make_hint
from starbattle_hints.puzzle import is_adjacent


# --- SHAPE DETECTION ---
class MShape:
    def __init__(self, region_id, cells, peaks, valley):
        self.region_id = region_id
        self.cells = cells
        self.peaks = peaks
        self.valley = valley


def find_m_shapes(state):
    """
    Finds regions shaped like an M.

    Cells are grouped by column and each column is described by its topmost
    row. A peak is a column whose top row is strictly higher (smaller) than
    its neighbouring columns; a valley is an interior column strictly lower
    than both neighbours. An M has at least five cells over at least three
    columns, exactly two peaks and a valley.

    :param PuzzleState state: The board.
    :returns: The M-shaped regions found.
    :rtype: list[MShape]
    """
    shapes = []
    for region_id in state.definition.region_ids():
        cells = state.region_cells(region_id)
        if len(cells) < 5:
            continue
        tops = {}
        for r, c in cells:
            tops[c] = min(r, tops.get(c, r))
        cols = sorted(tops)
        if len(cols) < 3:
            continue

        peaks, valley = [], None
        for i, col in enumerate(cols):
            left = tops[cols[i - 1]] if i > 0 else None
            right = tops[cols[i + 1]] if i < len(cols) - 1 else None
            if (left is None or tops[col] < left) and (right is None or tops[col] < right):
                peaks.append((tops[col], col))
            if valley is None and left is not None and right is not None \
                    and tops[col] > left and tops[col] > right:
                valley = (tops[col], col)
        if len(peaks) == 2 and valley is not None:
            shapes.append(MShape(region_id, cells, peaks, valley))
    return shapes


# --- ANALYSIS ---
def _can_hold_all(state, cells):
    """True when stars on every cell of `cells` break no rule together."""
    for i, a in enumerate(cells):
        if any(is_adjacent(a, b) for b in cells[i + 1:]):
            return False
    k = state.stars_per_unit
    for r in {r for r, _ in cells}:
        if state.count_stars(state.row_cells(r)) + sum(1 for x, _ in cells if x == r) > k:
            return False
    for c in {c for _, c in cells}:
        if state.count_stars(state.col_cells(c)) + sum(1 for _, y in cells if y == c) > k:
            return False
    return True


def analyze_m_shape(state, shape):
    """
    Returns (hint kind, cells) forced inside an M-shaped region, or None.
    """
    need = state.stars_needed(shape.cells)
    viable = state.viable_cells(shape.cells)
    if need <= 0 or len(viable) < need:
        return None

    if need == len(viable):
        if not _can_hold_all(state, viable):
            return None
        return HINT_PLACE_STAR, viable

    # The valley goes first so its verdict leads the hint.
    ordered = sorted(viable, key=lambda cell: cell != shape.valley)
    crosses = []
    for cell in ordered:
        blocked = [other for other in viable if is_adjacent(cell, other)]
        if len(viable) - 1 - len(blocked) < need - 1:
            crosses.append(cell)
    if crosses:
        return HINT_PLACE_CROSS, crosses
    return None


def find_the_m(state):
    for shape in find_m_shapes(state):
        forced = analyze_m_shape(state, shape)
        if forced is None:
            continue
        kind, cells = forced
        need = state.stars_needed(shape.cells)
        if kind == HINT_PLACE_STAR:
            reason = (f"only {len(cells)} of its cells can still take a star and it needs "
                      f"{need}, so they are all stars")
        else:
            reason = ("a star on the marked cell(s) would block so many of the other cells "
                      f"that the region could not reach its {need} remaining star(s)")
        hint = make_hint(
            kind=kind,
            technique=TECH_THE_M,
            cells=cells,
            explanation=(f"Region {shape.region_id} forms an M with two peaks and a valley; "
                         f"{reason}."),
            details={'peaks': [list(p) for p in shape.peaks], 'valley': list(shape.valley)},
            highlights={'regions': [shape.region_id], 'cells': list(shape.cells)},
        )
        return TechniqueResult(hint=hint)
    return TechniqueResult()
