"""**********************************************************************************
 * Title: pattern_matching.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * Matches canonical star templates against the live board. A template fixes
 * a set of stars, one candidate cell, a polarity and optional feature
 * predicates on an abstract board. It is tried under all eight rotations and
 * reflections of the square, each composed with the translation that lands
 * the template's first star on a real star. A match requires the placed stars
 * inside the template's footprint to be exactly the mapped stars, the mapped
 * candidate to be empty, and every feature to hold.
 **********************************************************************************"""

# --- IMPORTS ---
import json
import logging
import os

from starbattle_hints.constants import (
    TEMPLATE_DIR, TECH_PATTERN_MATCHING, MARK_STAR,
    FEATURE_OUTER_RING, FEATURE_RING_1, FEATURE_SAME_ROW_AS_STAR, FEATURE_SAME_COL_AS_STAR
)
from starbattle_hints.deductions import TechniqueResult, hint_kind_for_mark, make_hint


# --- D4 TRANSFORMS ---
TRANSFORMS = {
    'identity': lambda r, c: (r, c),
    'rotate90': lambda r, c: (c, -r),
    'rotate180': lambda r, c: (-r, -c),
    'rotate270': lambda r, c: (-c, r),
    'reflectH': lambda r, c: (r, -c),
    'reflectV': lambda r, c: (-r, c),
    'reflectD1': lambda r, c: (c, r),
    'reflectD2': lambda r, c: (-c, -r),
}


def transform_cells(cells, name):
    fn = TRANSFORMS[name]
    return [fn(r, c) for r, c in cells]


# --- FEATURES ---
def _on_outer_ring(size, row, col):
    last = size - 1
    on_ring = row in (1, last - 1) or col in (1, last - 1)
    on_edge = row in (0, last) or col in (0, last)
    return on_ring and not on_edge


def _in_ring_1(size, row, col):
    return (((row == 1 or row == size - 2) and 1 <= col < size - 1)
            or ((col == 1 or col == size - 2) and 1 <= row < size - 1))


def evaluate_feature(name, state, candidate, mapped_stars=None):
    """
    Evaluates one named feature for a mapped candidate cell.

    :param str name: The feature name from the template.
    :param PuzzleState state: The live board.
    :param tuple candidate: The candidate cell after mapping.
    :param list mapped_stars: The template stars after mapping.
    :returns: Whether the feature holds; unknown names are False.
    :rtype: bool
    """
    row, col = candidate
    if name == FEATURE_OUTER_RING:
        return _on_outer_ring(state.size, row, col)
    if name == FEATURE_RING_1:
        return _in_ring_1(state.size, row, col)
    if name == FEATURE_SAME_ROW_AS_STAR:
        return any(r == row for r, _ in mapped_stars or [])
    if name == FEATURE_SAME_COL_AS_STAR:
        return any(c == col for _, c in mapped_stars or [])
    logging.warning(f"Unknown pattern feature: {name}")
    return False


# --- TEMPLATES ---
class PatternTemplate:
    def __init__(self, template_id, stars, candidate, polarity, features=(), description='',
                 board_size=None, stars_per_unit=None):
        self.id = template_id
        self.stars = [tuple(s) for s in stars]
        self.candidate = tuple(candidate)
        self.polarity = polarity
        self.features = list(features)
        self.description = description
        self.board_size = board_size
        self.stars_per_unit = stars_per_unit

    @classmethod
    def from_dict(cls, data):
        return cls(data['id'], data['stars'], data['candidate'], data['polarity'],
                   data.get('features', []), data.get('description', ''),
                   data.get('board_size'), data.get('stars_per_unit'))

    def applies_to(self, state):
        if self.board_size is not None and self.board_size != state.size:
            return False
        if self.stars_per_unit is not None and self.stars_per_unit != state.stars_per_unit:
            return False
        return bool(self.stars)


_template_cache = {}


def load_templates(template_dir=TEMPLATE_DIR):
    """
    Reads every *.json template file in `template_dir`, once per directory.

    :returns: The templates, in file-name order then file order.
    :rtype: list[PatternTemplate]
    """
    if template_dir in _template_cache:
        return _template_cache[template_dir]
    templates = []
    for name in sorted(os.listdir(template_dir)):
        if not name.endswith('.json'):
            continue
        with open(os.path.join(template_dir, name), 'r') as f:
            entries = json.load(f)
        templates.extend(PatternTemplate.from_dict(entry) for entry in entries)
    logging.info(f"Loaded {len(templates)} pattern template(s) from {template_dir}")
    _template_cache[template_dir] = templates
    return templates


# --- MATCHING ---
def _in_bounds(cells, size):
    return all(0 <= r < size and 0 <= c < size for r, c in cells)


def _footprint_stars(state, cells):
    rows = [r for r, _ in cells]
    cols = [c for _, c in cells]
    return {(r, c) for r in range(min(rows), max(rows) + 1)
            for c in range(min(cols), max(cols) + 1) if state.is_star(r, c)}


def match_template(template, state, live_stars=None):
    """
    Finds the first placement of `template` on the board.

    :returns: (transform name, mapped stars, mapped candidate), or None.
    :rtype: tuple | None
    """
    if live_stars is None:
        live_stars = state.star_cells()
    size = state.size
    for name in TRANSFORMS:
        moved = transform_cells(template.stars + [template.candidate], name)
        stars, candidate = moved[:-1], moved[-1]
        for anchor in live_stars:
            dr, dc = anchor[0] - stars[0][0], anchor[1] - stars[0][1]
            mapped = [(r + dr, c + dc) for r, c in stars]
            target = (candidate[0] + dr, candidate[1] + dc)
            if not _in_bounds(mapped + [target], size):
                continue
            if not state.is_empty(*target):
                continue
            if _footprint_stars(state, mapped + [target]) != set(mapped):
                continue
            if all(evaluate_feature(f, state, target, mapped) for f in template.features):
                return name, mapped, target
    return None


def find_pattern_matches(state, template_dir=TEMPLATE_DIR):
    """Returns a hint for the first template that matches the board."""
    live_stars = state.star_cells()
    if not live_stars:
        return TechniqueResult()
    for template in load_templates(template_dir):
        if not template.applies_to(state):
            continue
        found = match_template(template, state, live_stars)
        if found is None:
            continue
        transform, mapped, target = found
        stars_text = ', '.join(f"({r},{c})" for r, c in mapped)
        verb = 'a star' if template.polarity == MARK_STAR else 'a cross'
        hint = make_hint(
            kind=hint_kind_for_mark(template.polarity),
            technique=TECH_PATTERN_MATCHING,
            cells=[target],
            explanation=(f"{template.description} Stars at {stars_text} fix "
                         f"({target[0]},{target[1]}) as {verb}."),
            details={'template': template.id, 'transform': transform},
            highlights={'cells': mapped + [target]},
        )
        return TechniqueResult(hint=hint)
    return TechniqueResult()
