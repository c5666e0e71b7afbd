"""**********************************************************************************
 * Title: n_rooks.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The N-Rooks argument for 10x10 boards with two stars per unit. Cut into
 * a 5x5 grid of 2x2 blocks, every pair of rows holds four stars in five
 * blocks that take at most one star each, so exactly one block per block-row
 * is empty; the same holds for block-columns. The empty blocks therefore sit
 * like non-attacking rooks, and a block that is the only place left for the
 * rook of its block-row or block-column must be empty.
 **********************************************************************************"""

# --- IMPORTS ---
from starbattle_hints.constants import (
    N_ROOKS_BOARD_SIZE, N_ROOKS_STARS_PER_UNIT, N_ROOKS_BLOCK_SIZE,
    TECH_N_ROOKS, HINT_PLACE_CROSS
)
from starbattle_hints.deductions import TechniqueResult, make_hint


# --- BLOCK ANALYSIS ---
def block_cells(b_row, b_col):
    r0, c0 = b_row * N_ROOKS_BLOCK_SIZE, b_col * N_ROOKS_BLOCK_SIZE
    return [(r0 + dr, c0 + dc) for dr in range(N_ROOKS_BLOCK_SIZE) for dc in range(N_ROOKS_BLOCK_SIZE)]


def classify_blocks(state):
    """
    Labels each block 'star', 'empty' (no cell can take a star) or 'unknown'.

    :param PuzzleState state: A 10x10 board.
    :returns: A dict from (b_row, b_col) to its label.
    :rtype: dict
    """
    n = state.size // N_ROOKS_BLOCK_SIZE
    labels = {}
    for b_row in range(n):
        for b_col in range(n):
            cells = block_cells(b_row, b_col)
            if state.count_stars(cells):
                labels[(b_row, b_col)] = 'star'
            elif all(state.is_impossible_star_cell(r, c) for r, c in cells):
                labels[(b_row, b_col)] = 'empty'
            else:
                labels[(b_row, b_col)] = 'unknown'
    return labels


def _forced_blocks(labels, n, transpose=False):
    """
    Yields (block, reason) pairs for blocks forced empty along block-rows.
    With transpose=True the same argument runs along block-columns.
    """
    def label(line, pos):
        return labels[(pos, line) if transpose else (line, pos)]

    line_name, cross_name = ('block column', 'block row') if transpose else ('block row', 'block column')
    open_lines = [line for line in range(n) if all(label(line, pos) != 'empty' for pos in range(n))]

    for line in open_lines:
        for pos in range(n):
            if label(line, pos) != 'unknown':
                continue
            if any(label(other, pos) == 'empty' for other in range(n)):
                continue
            rivals = [other for other in open_lines
                      if other != line and label(other, pos) == 'unknown']
            if not rivals:
                yield (line, pos), (f"{line_name} {line + 1} and {cross_name} {pos + 1} each need "
                                    f"exactly one empty block, and this block is the only one "
                                    f"left for {cross_name} {pos + 1}")


def find_n_rooks(state):
    """Returns a place-cross hint over the first block forced empty."""
    if state.size != N_ROOKS_BOARD_SIZE or state.stars_per_unit != N_ROOKS_STARS_PER_UNIT:
        return TechniqueResult()
    n = state.size // N_ROOKS_BLOCK_SIZE
    labels = classify_blocks(state)
    for transpose in (False, True):
        for (line, pos), reason in _forced_blocks(labels, n, transpose):
            b_row, b_col = (pos, line) if transpose else (line, pos)
            empties = state.empty_cells(block_cells(b_row, b_col))
            if not empties:
                continue
            hint = make_hint(
                kind=HINT_PLACE_CROSS,
                technique=TECH_N_ROOKS,
                cells=empties,
                explanation=(f"N-Rooks (2×2 blocks): {reason}, so the block at block row "
                             f"{b_row + 1}, block column {b_col + 1} holds no star."),
                details={'block': [b_row, b_col]},
                highlights={'cells': block_cells(b_row, b_col),
                            'rows': [b_row * 2, b_row * 2 + 1],
                            'cols': [b_col * 2, b_col * 2 + 1]},
            )
            return TechniqueResult(hint=hint)
    return TechniqueResult()
