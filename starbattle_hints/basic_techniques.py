"""**********************************************************************************
 * Title: basic_techniques.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The counting techniques that feed the generic deduction kinds. Each
 * detector is a pure function of a PuzzleState returning a TechniqueResult:
 *
 *   - trivial-marks:    crosses next to stars and in saturated units
 *   - locked-line:      per-unit star requirements over the viable cells
 *   - two-by-two:       at most one star in every 2x2 block
 *   - square-counting:  2-line bands split into blocks of capacity one
 *   - band-budget:      regions trapped in a band of rows or columns
 *   - confinement:      a row or column trapped inside one region
 **********************************************************************************"""

# --- IMPORTS ---
from starbattle_hints.constants import (
    MARK_CROSS, AREA_ROW, AREA_COLUMN, AREA_REGION,
    TECH_TRIVIAL_MARKS, TECH_LOCKED_LINE, TECH_TWO_BY_TWO, TECH_SQUARE_COUNTING,
    TECH_BAND_BUDGET, TECH_CONFINEMENT
)
from starbattle_hints.deductions import (
    AreaDeduction, AreaRelationDeduction, AreaSpec, BlockDeduction, CellDeduction,
    ExclusiveSetDeduction, TechniqueResult
)


def _unit_label(area_type, area_id):
    if area_type == AREA_REGION:
        return f"region {area_id}"
    return f"{area_type} {area_id + 1}"


# --- TRIVIAL MARKS ---
def find_trivial_marks(state):
    """Crosses every empty cell that can no longer take a star."""
    deductions = []
    size, k = state.size, state.stars_per_unit
    full_rows = {r for r in range(size) if state.count_stars(state.row_cells(r)) >= k}
    full_cols = {c for c in range(size) if state.count_stars(state.col_cells(c)) >= k}
    full_regions = {rid for rid in state.definition.region_ids()
                    if state.count_stars(state.region_cells(rid)) >= k}

    for r, c in state.empty_cells():
        if state.touches_star(r, c):
            reason = "it touches a star"
        elif r in full_rows:
            reason = f"row {r + 1} already has {k} star(s)"
        elif c in full_cols:
            reason = f"column {c + 1} already has {k} star(s)"
        elif state.region_of(r, c) in full_regions:
            reason = f"region {state.region_of(r, c)} already has {k} star(s)"
        else:
            continue
        deductions.append(CellDeduction(
            cell=(r, c), mark=MARK_CROSS, technique=TECH_TRIVIAL_MARKS,
            explanation=f"Cell ({r},{c}) cannot hold a star because {reason}."))
    return TechniqueResult(deductions=deductions)


# --- LOCKED LINE ---
def find_locked_lines(state):
    """
    States, for every row, column and region, how many stars its viable cells
    still have to take. A saturated unit is reported with max_stars = 0 over
    its leftover empties.
    """
    deductions = []
    for area_type, area_id, cells in state.all_units():
        empties = state.empty_cells(cells)
        if not empties:
            continue
        need = state.stars_needed(cells)
        label = _unit_label(area_type, area_id)
        if need <= 0:
            deductions.append(AreaDeduction(
                area_type=area_type, area_id=area_id, candidate_cells=tuple(empties),
                technique=TECH_LOCKED_LINE, max_stars=0,
                explanation=f"The {label} is already full, so its empty cells are crosses."))
            continue
        viable = state.viable_cells(cells)
        if not viable:
            continue
        deductions.append(AreaDeduction(
            area_type=area_type, area_id=area_id, candidate_cells=tuple(viable),
            technique=TECH_LOCKED_LINE, min_stars=need, max_stars=need, stars_required=need,
            explanation=(f"The {label} still needs {need} star(s) and only "
                         f"{len(viable)} cell(s) can take one.")))
    return TechniqueResult(deductions=deductions)


# --- 2x2 BLOCKS ---
def find_two_by_two_blocks(state):
    """Every coarse 2x2 block of an even board holds at most one star."""
    size = state.size
    if size % 2:
        return TechniqueResult()
    deductions = []
    for b_row in range(size // 2):
        for b_col in range(size // 2):
            cells = [(b_row * 2 + dr, b_col * 2 + dc) for dr in (0, 1) for dc in (0, 1)]
            if not state.empty_cells(cells):
                continue
            deductions.append(BlockDeduction(
                block=(b_row, b_col), technique=TECH_TWO_BY_TWO, max_stars=1,
                explanation=(f"The 2x2 block at ({b_row * 2},{b_col * 2}) can hold at most "
                             f"one star, since any two of its cells touch.")))
    return TechniqueResult(deductions=deductions)


# --- SQUARE COUNTING ---
def _band_blocks(state, start, axis):
    """Top-left corners of the 2x2 blocks tiling a two-line band."""
    if axis == AREA_ROW:
        return [(start, c) for c in range(0, state.size, 2)]
    return [(r, start) for r in range(0, state.size, 2)]


def find_square_counting(state):
    """
    Counts stars in two-line bands of an even board.

    A band of two rows (or columns) is tiled by size/2 blocks holding at most
    one star each, and must hold 2k stars in total. Blocks with no viable cell
    are empty; when the blocks still open are exactly as many as the stars the
    band lacks, each open block holds exactly one star.
    """
    size, k = state.size, state.stars_per_unit
    if size % 2:
        return TechniqueResult()
    deductions = []
    for axis in (AREA_ROW, AREA_COLUMN):
        for start in range(0, size, 2):
            if axis == AREA_ROW:
                band = [cell for r in (start, start + 1) for cell in state.row_cells(r)]
                band_label = f"rows {start + 1}-{start + 2}"
            else:
                band = [cell for c in (start, start + 1) for cell in state.col_cells(c)]
                band_label = f"columns {start + 1}-{start + 2}"
            need = 2 * k - state.count_stars(band)
            open_blocks, dead_blocks = [], []
            for r0, c0 in _band_blocks(state, start, axis):
                cells = [(r0 + dr, c0 + dc) for dr in (0, 1) for dc in (0, 1)]
                if state.count_stars(cells):
                    continue
                if state.viable_cells(cells):
                    open_blocks.append((r0, c0))
                elif state.empty_cells(cells):
                    dead_blocks.append((r0, c0))

            for block in dead_blocks:
                deductions.append(BlockDeduction(
                    block=block, technique=TECH_SQUARE_COUNTING, max_stars=0,
                    explanation=f"No cell of the 2x2 block at {block} can take a star."))
            if need > 0 and need == len(open_blocks):
                for block in open_blocks:
                    deductions.append(BlockDeduction(
                        block=block, technique=TECH_SQUARE_COUNTING,
                        min_stars=1, max_stars=1, stars_required=1,
                        explanation=(f"{band_label.capitalize()} still need {need} star(s) and "
                                     f"only {need} of their 2x2 blocks can take one, so the "
                                     f"block at {block} holds exactly one star.")))
    return TechniqueResult(deductions=deductions)


# --- BAND BUDGET ---
def _band_budget(state, axis, first, last, region_budgets, viable):
    k = state.stars_per_unit
    index = 0 if axis == AREA_ROW else 1
    lines = [state.row_cells(i) if axis == AREA_ROW else state.col_cells(i)
             for i in range(first, last + 1)]
    band = [cell for line in lines for cell in line]
    band_need = len(lines) * k - state.count_stars(band)

    inside, inside_need, inside_cells = [], 0, set()
    for region_id, need, region_viable in region_budgets:
        if all(first <= cell[index] <= last for cell in region_viable):
            inside.append(region_id)
            inside_need += need
            inside_cells.update(region_viable)

    deductions = []
    if not inside:
        return deductions
    leftover = band_need - inside_need
    rest = sorted(cell for cell in band if cell in viable and cell not in inside_cells)
    if leftover < 0 or (leftover > 0 and not rest):
        return deductions
    span = f"{axis}s {first + 1}-{last + 1}" if last > first else f"{axis} {first + 1}"
    regions_label = ', '.join(str(rid) for rid in inside)

    if leftover == 0:
        for cell in rest:
            deductions.append(CellDeduction(
                cell=cell, mark=MARK_CROSS, technique=TECH_BAND_BUDGET,
                explanation=(f"Region(s) {regions_label} must place all their remaining stars in "
                             f"{span}, which uses up its budget; ({cell[0]},{cell[1]}) is a cross.")))
    else:
        deductions.append(ExclusiveSetDeduction(
            cells=tuple(rest), stars_required=leftover, technique=TECH_BAND_BUDGET,
            explanation=(f"Region(s) {regions_label} sit inside {span}, leaving exactly "
                         f"{leftover} star(s) for its other cells.")))

    if last > first:
        areas = tuple(AreaSpec(area_type=axis, area_id=first + i,
                               candidate_cells=tuple(cell for cell in line if cell in viable))
                      for i, line in enumerate(lines))
        deductions.append(AreaRelationDeduction(
            areas=areas, total_stars=len(lines) * k, technique=TECH_BAND_BUDGET,
            explanation=f"Together {span} hold exactly {len(lines) * k} stars."))
    return deductions


def find_band_budgets(state):
    """
    Applies the region budget to every contiguous band of rows and columns.

    Regions whose viable cells all sit inside a band spend their whole
    remaining need there; the band's other viable cells get what is left.
    """
    size = state.size
    viable = set(state.viable_cells(state.empty_cells()))
    region_budgets = []
    for region_id in state.definition.region_ids():
        cells = state.region_cells(region_id)
        need = state.stars_needed(cells)
        region_viable = [cell for cell in cells if cell in viable]
        if need > 0 and region_viable:
            region_budgets.append((region_id, need, region_viable))

    deductions = []
    for axis in (AREA_ROW, AREA_COLUMN):
        for first in range(size):
            for last in range(first, size):
                if first == 0 and last == size - 1:
                    continue
                deductions.extend(_band_budget(state, axis, first, last, region_budgets, viable))
    return TechniqueResult(deductions=deductions)



# --- CONFINEMENT ---
def find_confinements(state):
    """A line whose viable cells lie in one region hands that region's rest the leftover."""
    deductions = []
    size = state.size
    for axis in (AREA_ROW, AREA_COLUMN):
        for i in range(size):
            line = state.row_cells(i) if axis == AREA_ROW else state.col_cells(i)
            line_need = state.stars_needed(line)
            viable = state.viable_cells(line)
            if line_need <= 0 or not viable:
                continue
            regions = {state.region_of(r, c) for r, c in viable}
            if len(regions) != 1:
                continue
            region_id = regions.pop()
            region_cells = state.region_cells(region_id)
            leftover = state.stars_needed(region_cells) - line_need
            others = [cell for cell in state.viable_cells(region_cells) if cell not in viable]
            if leftover < 0 or not others:
                continue
            label = _unit_label(axis, i)
            if leftover == 0:
                for cell in others:
                    deductions.append(CellDeduction(
                        cell=cell, mark=MARK_CROSS, technique=TECH_CONFINEMENT,
                        explanation=(f"The {label} must take its {line_need} star(s) from region "
                                     f"{region_id}, which leaves none for ({cell[0]},{cell[1]}).")))
            else:
                deductions.append(ExclusiveSetDeduction(
                    cells=tuple(others), stars_required=leftover, technique=TECH_CONFINEMENT,
                    explanation=(f"The {label} takes {line_need} of region {region_id}'s stars, "
                                 f"so its other cells hold exactly {leftover}.")))
    return TechniqueResult(deductions=deductions)
