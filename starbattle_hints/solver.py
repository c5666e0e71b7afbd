"""**********************************************************************************
 * Title: solver.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The main solver. It filters a cycle's deductions against the live board,
 * then runs seven resolution strategies in a fixed order (cell, area,
 * block, exclusive set, bounds, area relation, cross constraint). Each
 * strategy proposes candidate hints; the first candidate that survives a
 * trial application on a cloned board is returned. A cell forced both ways
 * stops the cycle with no hint.
 **********************************************************************************"""

# --- IMPORTS ---
import logging

from starbattle_hints.constants import (
    KIND_CELL, KIND_AREA, KIND_BLOCK, KIND_EXCLUSIVE_SET, KIND_AREA_RELATION,
    AREA_ROW, AREA_COLUMN, MARK_STAR, MARK_CROSS, MARK_TO_STATE,
    HINT_PLACE_STAR, HINT_PLACE_CROSS, MAX_BUNDLED_CELLS
)
from starbattle_hints.deductions import make_hint
from starbattle_hints.deduction_utils import filter_valid_deductions, block_cells_for
from starbattle_hints.technique_registry import collect_deductions
from starbattle_hints.validation import is_hint_consistent


class DeductionConflict(Exception):
    """Two deductions force the same cell to different marks."""

    def __init__(self, cells):
        self.cells = cells
        super().__init__(f"Cells forced both ways: {cells}")


# --- HELPERS ---
def _of_kind(deductions, kind):
    return [d for d in deductions if d.kind == kind]


def _fmt(cell):
    return f"({cell[0]},{cell[1]})"


def _area_highlights(area_type, area_id, cells):
    highlights = {'cells': list(cells)}
    if area_type == AREA_ROW:
        highlights['rows'] = [area_id]
    elif area_type == AREA_COLUMN:
        highlights['cols'] = [area_id]
    else:
        highlights['regions'] = [area_id]
    return highlights


def _single(kind, deduction, cells, fallback, highlights=None):
    return make_hint(kind=kind, technique=deduction.technique, cells=cells,
                     explanation=deduction.explanation or fallback,
                     details={'source': deduction.kind}, highlights=highlights)


# --- STRATEGY 1: CELLS ---
def resolve_cells(deductions, state):
    """
    Collapses cell deductions into a star set and a cross set.

    :raises DeductionConflict: If some cell is forced both ways.
    """
    by_mark = {MARK_STAR: {}, MARK_CROSS: {}}
    for d in _of_kind(deductions, KIND_CELL):
        by_mark[d.mark].setdefault(d.cell, []).append(d)
    conflicts = sorted(set(by_mark[MARK_STAR]) & set(by_mark[MARK_CROSS]))
    if conflicts:
        raise DeductionConflict(conflicts)

    targets = [(cell, MARK_STAR) for cell in sorted(by_mark[MARK_STAR])]
    targets += [(cell, MARK_CROSS) for cell in sorted(by_mark[MARK_CROSS])]
    if not targets:
        return

    if len(targets) > 1:
        chosen = targets[:MAX_BUNDLED_CELLS]
        techniques = []
        for cell, mark in chosen:
            for d in by_mark[mark][cell]:
                if d.technique not in techniques:
                    techniques.append(d.technique)
        marks = {mark for _, mark in chosen}
        schema = {cell: mark for cell, mark in chosen} if len(marks) > 1 else None
        yield make_hint(
            kind=HINT_PLACE_STAR if chosen[0][1] == MARK_STAR else HINT_PLACE_CROSS,
            technique=techniques[0],
            cells=[cell for cell, _ in chosen],
            explanation=(f"Combined deductions from {len(techniques)} technique(s): "
                         f"{', '.join(techniques)}."),
            details={'source': KIND_CELL, 'techniques': techniques},
            highlights={'cells': [cell for cell, _ in chosen]},
            schema_cell_types=schema,
        )

    # One cell at a time, in case the bundle itself was rejected.
    for cell, mark in targets:
        d = by_mark[mark][cell][0]
        yield _single(HINT_PLACE_STAR if mark == MARK_STAR else HINT_PLACE_CROSS, d, [cell],
                      f"Cell {_fmt(cell)} must be a {mark}.", {'cells': [cell]})


# --- STRATEGY 2: AREAS ---
def _bounded_set(d, cells, state, label, highlights):
    empties = state.empty_cells(cells)
    placed = state.count_stars(cells)
    if d.stars_required is not None and d.stars_required - placed == 1 and len(empties) == 1:
        yield _single(HINT_PLACE_STAR, d, empties,
                      f"The {label} needs one more star and only {_fmt(empties[0])} is left.",
                      highlights)
    if d.max_stars is not None and placed >= d.max_stars and empties:
        yield _single(HINT_PLACE_CROSS, d, empties,
                      f"The {label} cannot take any more stars.", highlights)
    if d.min_stars is not None and d.min_stars - placed == 1 and len(empties) == 1:
        yield _single(HINT_PLACE_STAR, d, empties,
                      f"The {label} needs at least one more star and only {_fmt(empties[0])} is left.",
                      highlights)


def resolve_areas(deductions, state):
    for d in _of_kind(deductions, KIND_AREA):
        label = f"{d.area_type} {d.area_id}"
        yield from _bounded_set(d, d.candidate_cells, state, label,
                                _area_highlights(d.area_type, d.area_id, d.candidate_cells))


# --- STRATEGY 3: BLOCKS ---
def resolve_blocks(deductions, state):
    for d in _of_kind(deductions, KIND_BLOCK):
        cells = block_cells_for(d, state.size)
        label = f"2x2 block at {_fmt(cells[0])}"
        yield from _bounded_set(d, cells, state, label, {'cells': cells})


# --- STRATEGY 4: EXCLUSIVE SETS ---
def resolve_exclusive_sets(deductions, state):
    for d in _of_kind(deductions, KIND_EXCLUSIVE_SET):
        empties = state.empty_cells(d.cells)
        remaining = d.stars_required - state.count_stars(d.cells)
        if remaining == 1 and len(empties) == 1:
            yield _single(HINT_PLACE_STAR, d, empties,
                          f"This set needs one more star and only {_fmt(empties[0])} is left.",
                          {'cells': list(d.cells)})


# --- STRATEGY 5: BOUNDS ---
def resolve_bounds(deductions, state):
    """Promotes an area's bounds to certainty when candidates exactly match the need."""
    for d in _of_kind(deductions, KIND_AREA):
        empties = state.empty_cells(d.candidate_cells)
        if not empties:
            continue
        placed = state.count_stars(d.candidate_cells)
        exact = d.stars_required
        if exact is None and d.min_stars is not None and d.min_stars == d.max_stars:
            exact = d.min_stars
        highlights = _area_highlights(d.area_type, d.area_id, d.candidate_cells)
        label = f"{d.area_type} {d.area_id}"
        if exact is not None and exact - placed == len(empties):
            yield _single(HINT_PLACE_STAR, d, empties,
                          f"The {label} needs exactly {len(empties)} more star(s) in "
                          f"{len(empties)} candidate cell(s).", highlights)
        elif d.min_stars is not None and d.min_stars - placed == len(empties):
            yield _single(HINT_PLACE_STAR, d, empties,
                          f"The {label} needs at least {len(empties)} more star(s) in "
                          f"{len(empties)} candidate cell(s).", highlights)


# --- STRATEGY 6: AREA RELATIONS ---
def _unit_cells(state, area_type, area_id):
    if area_type == AREA_ROW:
        return state.row_cells(area_id)
    if area_type == AREA_COLUMN:
        return state.col_cells(area_id)
    return state.region_cells(area_id)


def resolve_area_relations(deductions, state):
    for d in _of_kind(deductions, KIND_AREA_RELATION):
        placed = sum(state.count_stars(_unit_cells(state, a.area_type, a.area_id)) for a in d.areas)
        candidates = []
        for area in d.areas:
            for cell in state.empty_cells(area.candidate_cells):
                if cell not in candidates:
                    candidates.append(cell)
        if d.total_stars - placed == 1 and len(candidates) == 1:
            yield _single(HINT_PLACE_STAR, d, candidates,
                          f"These areas need one more star in total and only "
                          f"{_fmt(candidates[0])} can take it.", {'cells': candidates})


# --- STRATEGY 7: CROSS CONSTRAINTS ---
def resolve_cross_constraints(deductions, state):
    exclusives = _of_kind(deductions, KIND_EXCLUSIVE_SET)
    for area in _of_kind(deductions, KIND_AREA):
        area_empties = set(state.empty_cells(area.candidate_cells))
        for ex in exclusives:
            ex_empties = state.empty_cells(ex.cells)
            remaining = ex.stars_required - state.count_stars(ex.cells)
            if len(ex_empties) == 1 and remaining == 1 and set(ex_empties) <= area_empties:
                yield _single(HINT_PLACE_STAR, ex, ex_empties,
                              f"A set inside the {area.area_type} {area.area_id} needs its "
                              f"last star at {_fmt(ex_empties[0])}.", {'cells': list(ex.cells)})


STRATEGIES = [
    ('cell', resolve_cells),
    ('area', resolve_areas),
    ('block', resolve_blocks),
    ('exclusive-set', resolve_exclusive_sets),
    ('bounds', resolve_bounds),
    ('area-relation', resolve_area_relations),
    ('cross-constraint', resolve_cross_constraints),
]


# --- ENTRY POINTS ---
def analyze_deductions(deductions, state):
    """
    Turns a cycle's deductions into at most one safe hint.

    :param list deductions: Merged deductions from every detector.
    :param PuzzleState state: The live board; it is never modified.
    :returns: The first candidate hint that keeps the board valid, or None.
    :rtype: Hint | None
    """
    valid = filter_valid_deductions(deductions, state)
    considered = len(valid)
    try:
        for name, strategy in STRATEGIES:
            for hint in strategy(valid, state):
                if not is_hint_consistent(state, hint):
                    logging.debug(f"Rejected {hint.technique} hint from {name} resolution: "
                                  f"{hint.result_cells}")
                    continue
                hint.details['strategy'] = name
                hint.details['deductions_considered'] = considered
                return hint
    except DeductionConflict as e:
        logging.error(f"Solver inconsistency, no hint this cycle: {e}")
        return None
    logging.info(f"No hint found from {considered} deduction(s)")
    return None


def solve(state):
    """Runs every detector on `state` and returns the next certain move, if any."""
    return analyze_deductions(collect_deductions(state), state)


def apply_hint(state, hint):
    """Returns a copy of `state` with the hint's marks written in."""
    result = state.clone()
    for cell in hint.result_cells:
        r, c = cell
        result.cells[r][c] = MARK_TO_STATE[hint.mark_for((r, c))]
    return result
