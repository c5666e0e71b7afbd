"""**********************************************************************************
 * Title: app.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * A small Flask service exposing the hint engine to a board UI. Every
 * request carries the full board (region grid, stars per region and the
 * player's marks), so the service keeps no session state.
 **********************************************************************************"""

# --- IMPORTS ---
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from starbattle_hints.deductions import Hint
from starbattle_hints.puzzle import (
    InvalidPuzzleDefinition, InvalidPuzzleState, load_puzzle_def, load_puzzle_state
)
from starbattle_hints.solver import solve
from starbattle_hints.validation import is_puzzle_complete, rule_violations
from starbattle_hints.z3_solver import Z3StarBattleSolver

app = Flask(__name__)
CORS(app)


def _state_from_request(data):
    """Builds a PuzzleState from a request body; raises on malformed input."""
    definition = load_puzzle_def(data.get('regionGrid'), data.get('starsPerRegion'))
    return load_puzzle_state(definition, data.get('playerGrid'))


def _bad_definition(e):
    return jsonify({'error': 'Invalid puzzle definition', 'issues': e.issues}), 400


# --- ROUTES ---
@app.route('/api/hint', methods=['POST'])
def get_hint():
    try:
        data = request.get_json(silent=True) or {}
        if data.get('regionGrid') is None or data.get('starsPerRegion') is None:
            return jsonify({'error': 'Missing regionGrid or starsPerRegion in request'}), 400
        state = _state_from_request(data)
        hint = solve(state)
        if hint:
            logging.info(f"Hint {hint.id}: {hint.technique} -> {hint.kind} {hint.result_cells}")
        return jsonify({'hint': hint.to_dict() if hint else None})
    except InvalidPuzzleDefinition as e:
        return _bad_definition(e)
    except InvalidPuzzleState as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logging.error(f"Error in /api/hint: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/validate', methods=['POST'])
def validate_board():
    try:
        data = request.get_json(silent=True) or {}
        if data.get('regionGrid') is None or data.get('starsPerRegion') is None:
            return jsonify({'error': 'Missing regionGrid or starsPerRegion in request'}), 400
        state = _state_from_request(data)
        return jsonify({'violations': rule_violations(state), 'complete': is_puzzle_complete(state)})
    except InvalidPuzzleDefinition as e:
        return _bad_definition(e)
    except InvalidPuzzleState as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logging.error(f"Error in /api/validate: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/verify_hint', methods=['POST'])
def verify_hint():
    try:
        data = request.get_json(silent=True) or {}
        if not all([data.get('regionGrid'), data.get('starsPerRegion'), data.get('hint')]):
            return jsonify({'error': 'Missing data in request'}), 400
        state = _state_from_request(data)
        hint = Hint.from_dict(data['hint'])
        solver = Z3StarBattleSolver(state.definition.regions, state.stars_per_unit)
        return jsonify({'forced': solver.verify_hint(state.cells, hint)})
    except InvalidPuzzleDefinition as e:
        return _bad_definition(e)
    except (InvalidPuzzleState, KeyError, TypeError) as e:
        return jsonify({'error': f"Malformed request: {e}"}), 400
    except Exception as e:
        logging.error(f"Error in /api/verify_hint: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500
