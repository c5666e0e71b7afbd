"""**********************************************************************************
 * Title: deduction_utils.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Housekeeping for raw detector output. filter_valid_deductions drops
 * deductions the live board has already settled; merge_deductions folds
 * several detectors' lists together, collapsing duplicates and keeping the
 * more specific of two colliding bounds. Disagreeing cell deductions are
 * never resolved here: both are kept so the solver sees the inconsistency.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
import math

from starbattle_hints.constants import (
    KIND_CELL, KIND_AREA, KIND_BLOCK, KIND_EXCLUSIVE_SET, KIND_AREA_RELATION,
    CELL_GRANULAR_BLOCK_TECHNIQUES, STATE_EMPTY
)


# --- BLOCK COORDINATES ---
def block_origin(deduction):
    """Top-left cell of a block deduction, whatever unit its technique uses."""
    b_row, b_col = deduction.block
    if deduction.technique in CELL_GRANULAR_BLOCK_TECHNIQUES:
        return b_row, b_col
    return b_row * 2, b_col * 2


def block_cells_for(deduction, size):
    r0, c0 = block_origin(deduction)
    return [(r, c) for r in (r0, r0 + 1) for c in (c0, c0 + 1)
            if 0 <= r < size and 0 <= c < size]


def deduction_cells(deduction, size):
    """Every cell a deduction talks about."""
    if deduction.kind == KIND_CELL:
        return [deduction.cell]
    if deduction.kind == KIND_AREA:
        return list(deduction.candidate_cells)
    if deduction.kind == KIND_BLOCK:
        return block_cells_for(deduction, size)
    if deduction.kind == KIND_EXCLUSIVE_SET:
        return list(deduction.cells)
    return [cell for area in deduction.areas for cell in area.candidate_cells]


# --- FILTERING ---
def _is_still_useful(deduction, state):
    kind = deduction.kind
    if kind == KIND_CELL:
        # Either already applied or contradicted by the player's mark.
        r, c = deduction.cell
        return state.cells[r][c] == STATE_EMPTY

    if kind == KIND_AREA_RELATION:
        return any(state.empty_cells(area.candidate_cells) for area in deduction.areas)

    cells = deduction_cells(deduction, state.size)
    if not state.empty_cells(cells):
        return False
    required = deduction.stars_required
    if required is not None and state.count_stars(cells) >= required:
        return False
    return True


def filter_valid_deductions(deductions, state):
    """
    Drops deductions that are already satisfied or contradicted by `state`.

    :param list deductions: Raw deductions from this cycle.
    :param PuzzleState state: The live board.
    :returns: The deductions that can still lead to a move, in input order.
    :rtype: list
    """
    return [d for d in deductions if _is_still_useful(d, state)]


# --- MERGING ---
def deduction_key(deduction):
    """Collision key for merging, or None for kinds that are never merged."""
    kind = deduction.kind
    if kind == KIND_CELL:
        r, c = deduction.cell
        return f"cell:{r},{c}"
    if kind == KIND_BLOCK:
        r0, c0 = block_origin(deduction)
        return f"block:{r0},{c0}"
    if kind == KIND_AREA:
        return f"area:{deduction.area_type}:{deduction.area_id}"
    if kind == KIND_EXCLUSIVE_SET:
        return 'exclusive-set:' + ';'.join(f"{r},{c}" for r, c in sorted(deduction.cells))
    return None


def _constraint(deduction):
    """The part of a deduction that matters for equality; provenance is ignored."""
    kind = deduction.kind
    if kind == KIND_CELL:
        return deduction.cell, deduction.mark
    if kind == KIND_AREA:
        return (deduction.area_type, deduction.area_id, tuple(sorted(deduction.candidate_cells)),
                deduction.min_stars, deduction.max_stars, deduction.stars_required)
    if kind == KIND_BLOCK:
        return block_origin(deduction), deduction.min_stars, deduction.max_stars, deduction.stars_required
    if kind == KIND_EXCLUSIVE_SET:
        return tuple(sorted(deduction.cells)), deduction.stars_required
    return deduction.areas, deduction.total_stars


def _bound_width(deduction):
    upper = deduction.max_stars if deduction.max_stars is not None else math.inf
    lower = deduction.min_stars if deduction.min_stars is not None else 0
    return upper - lower


def compare_specificity(a, b):
    """
    Orders two area or block deductions by how much they pin down.

    An exact stars_required beats any bound; between two bounds the narrower
    [min, max] range wins.

    :returns: 1 if `a` is more specific, -1 if `b` is, 0 when they tie.
    :rtype: int
    """
    a_exact, b_exact = a.stars_required is not None, b.stars_required is not None
    if a_exact != b_exact:
        return 1 if a_exact else -1
    if a_exact:
        return 0
    a_width, b_width = _bound_width(a), _bound_width(b)
    if a_width < b_width:
        return 1
    if a_width > b_width:
        return -1
    return 0


def resolve_deduction_conflict(existing, new):
    """
    Picks the deduction to keep for a key collision.

    :returns: The surviving deduction, or None when the two cannot be
        reconciled (a cell forced both ways, or one set given two counts).
    """
    if _constraint(existing) == _constraint(new):
        return existing
    if existing.kind in (KIND_AREA, KIND_BLOCK):
        return new if compare_specificity(new, existing) > 0 else existing
    return None


def merge_deductions(existing, new):
    """
    Folds `new` into `existing`, keyed per deduction kind.

    Area relations are always appended. Conflicting deductions are both kept
    and a warning is logged, so the conflict reaches the solver.

    :param list existing: Previously merged deductions.
    :param list new: Deductions to fold in.
    :returns: A new merged list; the inputs are left untouched.
    :rtype: list
    """
    merged = []
    positions = {}
    for deduction in list(existing) + list(new):
        key = deduction_key(deduction)
        if key is None or key not in positions:
            if key is not None:
                positions[key] = len(merged)
            merged.append(deduction)
            continue
        kept = resolve_deduction_conflict(merged[positions[key]], deduction)
        if kept is None:
            logging.warning(f"Unresolved deduction conflict on {key} "
                            f"({merged[positions[key]].technique} vs {deduction.technique})")
            merged.append(deduction)
        else:
            merged[positions[key]] = kept
    return merged
