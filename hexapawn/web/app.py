from flask import Flask, jsonify, request
from typing import Optional
from ..core.move import Move
from ..session import GameSession
from .game_controller import GameController


def _move_from_request(data) -> Move:
    if not isinstance(data, dict):
        raise ValueError("Move must be sent as a JSON object")
    if "source" in data and "dest" in data:
        return Move.from_squares(str(data["source"]), str(data["dest"]))
    if "move" in data:
        return Move.parse(str(data["move"]))
    fields = ("source_row", "source_col", "dest_row", "dest_col")
    if all(key in data for key in fields):
        return Move(*(int(data[key]) for key in fields))
    raise ValueError("Missing move: give source/dest squares, a move string or row/col fields")


def create_app(session: GameSession, controller: Optional[GameController] = None) -> Flask:
    """Create and configure Flask application around a started session."""
    app = Flask(__name__)
    game_controller = controller or GameController(session)
    app.config["GAME_CONTROLLER"] = game_controller

    @app.route('/api/new_game', methods=['POST'])
    def new_game():
        """Start a new game from the initial board."""
        return jsonify(game_controller.new_game())

    @app.route('/api/make_move', methods=['POST'])
    def make_move():
        """Submit a human move; the computer replies in the same request."""
        try:
            data = request.get_json(silent=True) or {}
            move = _move_from_request(data)
            return jsonify(game_controller.make_human_move(move))
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

    @app.route('/api/game_state', methods=['GET'])
    def get_game_state():
        return jsonify(game_controller.get_game_state())

    @app.route('/api/reset_ai', methods=['POST'])
    def reset_ai():
        """Forget everything the computer has learned."""
        return jsonify(game_controller.reset_ai())

    @app.route('/api/reset_stats', methods=['POST'])
    def reset_stats():
        """Zero the games played and wins."""
        return jsonify(game_controller.reset_stats())

    @app.route('/api/skill', methods=['GET'])
    def get_skill():
        return jsonify({'skill': game_controller.get_skill()})

    return app
