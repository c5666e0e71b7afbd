"""**********************************************************************************
 * Title: technique_registry.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The fixed, ordered list of technique detectors run on every solve cycle,
 * and the collector that runs them and merges their output into one
 * deduction list. Ready-made hints from shape-based detectors are lowered to
 * per-cell deductions so the solver treats every detector alike.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from collections import namedtuple

from starbattle_hints.constants import (
    TECH_PATTERN_MATCHING, TECH_N_ROOKS, TECH_THE_M, TECH_TRIVIAL_MARKS, TECH_LOCKED_LINE,
    TECH_TWO_BY_TWO, TECH_SQUARE_COUNTING, TECH_BAND_BUDGET, TECH_CONFINEMENT
)
from starbattle_hints.deductions import CellDeduction
from starbattle_hints.deduction_utils import merge_deductions
from starbattle_hints.basic_techniques import (
    find_trivial_marks, find_locked_lines, find_two_by_two_blocks, find_square_counting,
    find_band_budgets, find_confinements
)
from starbattle_hints.pattern_matching import find_pattern_matches
from starbattle_hints.n_rooks import find_n_rooks
from starbattle_hints.the_m import find_the_m

Technique = namedtuple('Technique', ['id', 'name', 'find'])

TECHNIQUES = [
    Technique(TECH_PATTERN_MATCHING, 'Pattern matching', find_pattern_matches),
    Technique(TECH_N_ROOKS, 'N-Rooks', find_n_rooks),
    Technique(TECH_THE_M, 'The M', find_the_m),
    Technique(TECH_TRIVIAL_MARKS, 'Trivial marks', find_trivial_marks),
    Technique(TECH_LOCKED_LINE, 'Locked line', find_locked_lines),
    Technique(TECH_TWO_BY_TWO, '2x2 blocks', find_two_by_two_blocks),
    Technique(TECH_SQUARE_COUNTING, 'Square counting', find_square_counting),
    Technique(TECH_BAND_BUDGET, 'Band budget', find_band_budgets),
    Technique(TECH_CONFINEMENT, 'Confinement', find_confinements),
]


def hint_to_deductions(hint):
    """Lowers a detector's ready-made hint to one cell deduction per cell."""
    return [CellDeduction(cell=tuple(cell), mark=hint.mark_for(tuple(cell)),
                          technique=hint.technique, explanation=hint.explanation)
            for cell in hint.result_cells]


def collect_deductions(state, techniques=None):
    """
    Runs every detector on `state` and merges what they produce.

    :param PuzzleState state: The live board; detectors never modify it.
    :param list techniques: Detectors to run, defaulting to TECHNIQUES.
    :returns: The merged deduction list for this cycle.
    :rtype: list
    """
    merged = []
    for technique in techniques if techniques is not None else TECHNIQUES:
        result = technique.find(state)
        produced = list(result.deductions)
        if result.hint is not None:
            produced.extend(hint_to_deductions(result.hint))
        if produced:
            logging.debug(f"{technique.name}: {len(produced)} deduction(s)")
        merged = merge_deductions(merged, produced)
    return merged
