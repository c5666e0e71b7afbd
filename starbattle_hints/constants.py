"""**********************************************************************************
 * Title: constants.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Static data constants shared by the hint engine: cell mark values as the
 * board UI sends them, technique identifiers, hint kinds, pattern feature
 * names and server defaults.
 **********************************************************************************"""

import os

# --- CELL STATES ---
STATE_EMPTY = 0
STATE_STAR = 1
STATE_SECONDARY_MARK = 2  # a cross ("this cell holds no star")

VALID_CELL_STATES = (STATE_EMPTY, STATE_STAR, STATE_SECONDARY_MARK)

# --- HINTS ---
HINT_PLACE_STAR = 'place-star'
HINT_PLACE_CROSS = 'place-cross'

MARK_STAR = 'star'
MARK_CROSS = 'cross'
MARK_TO_STATE = {MARK_STAR: STATE_STAR, MARK_CROSS: STATE_SECONDARY_MARK}

# Upper bound on how many simultaneously-certain cells one hint may carry.
MAX_BUNDLED_CELLS = 10

# --- DEDUCTION KINDS ---
KIND_CELL = 'cell'
KIND_AREA = 'area'
KIND_BLOCK = 'block'
KIND_EXCLUSIVE_SET = 'exclusive-set'
KIND_AREA_RELATION = 'area-relation'

AREA_ROW = 'row'
AREA_COLUMN = 'column'
AREA_REGION = 'region'

# --- TECHNIQUE IDS ---
TECH_TRIVIAL_MARKS = 'trivial-marks'
TECH_LOCKED_LINE = 'locked-line'
TECH_TWO_BY_TWO = 'two-by-two'
TECH_SQUARE_COUNTING = 'square-counting'
TECH_BAND_BUDGET = 'band-budget'
TECH_CONFINEMENT = 'confinement'
TECH_PATTERN_MATCHING = 'pattern-matching'
TECH_N_ROOKS = 'n-rooks'
TECH_THE_M = 'the-m'

# Techniques whose block deductions already use top-left cell coordinates.
CELL_GRANULAR_BLOCK_TECHNIQUES = frozenset({TECH_SQUARE_COUNTING})

# --- N-ROOKS ---
N_ROOKS_BOARD_SIZE = 10
N_ROOKS_STARS_PER_UNIT = 2
N_ROOKS_BLOCK_SIZE = 2

# --- PATTERN MATCHING ---
FEATURE_OUTER_RING = 'candidate_on_outer_ring'
FEATURE_RING_1 = 'candidate_in_ring_1'
FEATURE_SAME_ROW_AS_STAR = 'candidate_in_same_row_as_any_star'
FEATURE_SAME_COL_AS_STAR = 'candidate_in_same_col_as_any_star'

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

# --- SERVER DEFAULTS ---
DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 5001
