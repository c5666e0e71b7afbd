"""**********************************************************************************
 * Title: validation.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Rule checks for Star Battle boards. validate_regions inspects a definition
 * once, at load time; validate_state reports every broken board rule on a
 * partially filled grid and doubles as the solver's trial oracle. The module
 * also answers whether a board is finished and whether a hint can be applied
 * without breaking anything.
 **********************************************************************************"""

# --- IMPORTS ---
from starbattle_hints.constants import STATE_EMPTY, STATE_STAR, MARK_TO_STATE
from starbattle_hints.puzzle import neighbors8


# --- DEFINITION CHECKS ---
def validate_regions(definition):
    """
    Structural check of a puzzle definition.

    The region grid must be size x size, use only integer ids in [1, size],
    and use every one of those ids, so that the ids partition the board.

    :param PuzzleDef definition: The definition to inspect.
    :returns: Human-readable issues; empty when the definition is sound.
    :rtype: list[str]
    """
    issues = []
    size = definition.size
    if not isinstance(size, int) or size < 1:
        return [f"Board size must be at least 1 (got {size!r})."]
    k = definition.stars_per_unit
    if not isinstance(k, int) or isinstance(k, bool) or k < 1:
        issues.append(f"Stars per unit must be a positive integer (got {k!r}).")

    regions = definition.regions
    if len(regions) != size or any(len(row) != size for row in regions):
        issues.append(f"Region grid must be {size}x{size}.")
        return issues

    seen = set()
    for r, row in enumerate(regions):
        for c, region_id in enumerate(row):
            if not isinstance(region_id, int) or isinstance(region_id, bool):
                issues.append(f"Cell ({r},{c}) has a non-integer region id {region_id!r}.")
            elif not 1 <= region_id <= size:
                issues.append(f"Cell ({r},{c}) has region id {region_id}, outside 1..{size}.")
            else:
                seen.add(region_id)
    for region_id in range(1, size + 1):
        if region_id not in seen:
            issues.append(f"Region {region_id} has no cells.")
    return issues


# --- STATE CHECKS ---
def validate_state(state):
    """
    Lists every board rule the current marks break.

    Reports rows, columns and regions holding more than stars_per_unit stars
    and every pair of touching stars. Messages are de-duplicated and come out
    in a stable order.

    :param PuzzleState state: The board to check.
    :returns: Violation messages; empty when the board is consistent.
    :rtype: list[str]
    """
    messages = []
    size, k = state.size, state.stars_per_unit

    for r in range(size):
        count = state.count_stars(state.row_cells(r))
        if count > k:
            messages.append(f"Row {r + 1} has {count} stars (maximum is {k}).")
    for c in range(size):
        count = state.count_stars(state.col_cells(c))
        if count > k:
            messages.append(f"Column {c + 1} has {count} stars (maximum is {k}).")
    for region_id in state.definition.region_ids():
        count = state.count_stars(state.region_cells(region_id))
        if count > k:
            messages.append(f"Region {region_id} has {count} stars (maximum is {k}).")

    for r, c in state.star_cells():
        for nr, nc in neighbors8(r, c, size):
            if state.cells[nr][nc] == STATE_STAR:
                a, b = sorted([(r, c), (nr, nc)])
                messages.append(f"Two stars touch at ({a[0]},{a[1]}) and ({b[0]},{b[1]}).")

    return list(dict.fromkeys(messages))


def is_puzzle_complete(state):
    """True when every cell is marked and every unit holds exactly its quota."""
    if any(v == STATE_EMPTY for row in state.cells for v in row):
        return False
    k = state.stars_per_unit
    if any(state.count_stars(cells) != k for _, _, cells in state.all_units()):
        return False
    return not validate_state(state)


def rule_violations(state):
    """Like validate_state, but also flags units that can no longer be filled."""
    messages = validate_state(state)
    for area_type, area_id, cells in state.all_units():
        need = state.stars_needed(cells)
        if need > 0 and len(state.viable_cells(cells)) < need:
            label = f"{area_type.capitalize()} {area_id + 1 if area_type != 'region' else area_id}"
            messages.append(f"{label} cannot fit its remaining {need} star(s).")
    return messages


# --- HINT CHECKS ---
def apply_hint_to_cells(cells, hint):
    """Writes a hint's marks into a copy of a mark grid."""
    result = [list(row) for row in cells]
    for r, c in hint.result_cells:
        result[r][c] = MARK_TO_STATE[hint.mark_for((r, c))]
    return result


def is_hint_consistent(state, hint):
    """
    Checks that a hint can be applied to `state` without breaking a rule.

    A hint may not overwrite a cell that already holds a different mark.

    :param PuzzleState state: The board the hint was computed for.
    :param Hint hint: The candidate move.
    :returns: Whether the move leaves the board valid.
    :rtype: bool
    """
    for r, c in hint.result_cells:
        current = state.cells[r][c]
        wanted = MARK_TO_STATE[hint.mark_for((r, c))]
        if current != STATE_EMPTY and current != wanted:
            return False
    trial = state.clone()
    trial.cells = apply_hint_to_cells(state.cells, hint)
    return not validate_state(trial)
