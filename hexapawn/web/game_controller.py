import threading
from typing import Any, Dict
from ..core.move import Move
from ..session import GameSession


class GameController:
    """Serializes web requests onto one game session."""

    def __init__(self, session: GameSession):
        self.session = session
        self._lock = threading.Lock()

    def new_game(self) -> Dict[str, Any]:
        with self._lock:
            self.session.new_game()
            return self.session.to_dict()

    def get_game_state(self) -> Dict[str, Any]:
        with self._lock:
            return self.session.to_dict()

    def make_human_move(self, move: Move) -> Dict[str, Any]:
        """Play a human move; raises ValueError for moves the tree rejects."""
        with self._lock:
            result = self.session.human_move(move)
            if not result.legal:
                raise ValueError(f"Illegal move {move}: {result.error}")
            state = self.session.to_dict()
            state["reply"] = result.reply
            return state

    def reset_ai(self) -> Dict[str, Any]:
        with self._lock:
            self.session.reset_ai()
            state = self.session.to_dict()
            state["skill"] = self.session.skill()
            return state

    def reset_stats(self) -> Dict[str, Any]:
        with self._lock:
            self.session.reset_stats()
            return self.session.to_dict()

    def get_skill(self) -> int:
        with self._lock:
            return self.session.skill()
