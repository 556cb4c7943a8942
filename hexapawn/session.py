"""
One player's games against the learning computer.

The session owns the game tree, the random source and the store. The
human plays white and moves first; the computer plays black. Whenever
the human wins, the computer's last choice is pruned from the tree and
deactivated in the store, so it is never played again.
"""

import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .core.bitboard import BitBoard, Color
from .core.game_tree import GameNode, count_nodes, find_legal_child, generate, prune
from .core.move import Move, apply_move, derive_move
from .db import Database, PersistenceError, snapshot_tree
from .players import ComputerPlayer

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    legal: bool
    move: Optional[str] = None
    reply: Optional[str] = None
    winner: Optional[str] = None
    error: Optional[str] = None


@dataclass
class GameStats:
    games_played: int = 0
    white_wins: int = 0

    @property
    def black_wins(self) -> int:
        return self.games_played - self.white_wins


@dataclass
class GameState:
    """Serializable game state for the web interface."""
    board: List[List[int]]
    turn: str
    game_over: bool
    winner: Optional[str]
    legal_moves: List[str]
    move_history: List[str]
    games_played: int
    white_wins: int
    black_wins: int
    human_color: str = field(default=Color.WHITE.name)


class GameSession:
    def __init__(self, db: Database, rng: Optional[random.Random] = None):
        self.db = db
        self.human_color = Color.WHITE
        self.computer = ComputerPlayer(color=Color.BLACK, rng=rng)
        self.stats = GameStats()
        self.root: Optional[GameNode] = None
        self.current: Optional[GameNode] = None
        self.history: List[Move] = []

        # Last board the computer moved from and the board it chose
        self._last_parent: Optional[GameNode] = None
        self._last_choice: Optional[GameNode] = None

        # One worker: store writes run in submission order
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hexapawn-db")
        self._pending: List[Future] = []
        self._pending_lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "GameSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def start(self) -> GameNode:
        """
        Load the learned tree and the saved statistics from the store. On
        first run (or if the store cannot be read) generate the full tree
        and store it in the background; play can begin before the write
        finishes.
        """
        self._check_open()
        root = None
        try:
            root = self.db.load_active_tree()
        except PersistenceError as e:
            logger.warning("Could not load game tree, regenerating: %s", e)

        if root is None:
            root = generate(BitBoard.initial())
            logger.info("Generated game tree with %d boards", count_nodes(root))
            self._store_new_tree(root)

        try:
            self.stats = GameStats(*self.db.load_stats())
        except PersistenceError as e:
            logger.warning("Could not load game statistics, starting from zero: %s", e)
        self.root = root
        self.new_game()
        return root

    def _store_new_tree(self, root: GameNode) -> None:
        # Rows are taken here, before any game can prune the tree
        self._submit(self.db.insert_records, snapshot_tree(root))

    def new_game(self) -> None:
        if self.root is None:
            raise ValueError("Session has not been started")
        self.current = self.root
        self.history = []
        self._last_parent = None
        self._last_choice = None

    def is_game_over(self) -> bool:
        return self.current is not None and self.current.is_victory()

    def winner(self) -> Optional[Color]:
        if not self.is_game_over():
            return None
        # The side to move on a victory board has lost
        return self.current.position.turn.opponent()

    def legal_moves(self) -> List[Move]:
        if self.current is None:
            return []
        parent = self.current.position
        return [derive_move(parent, child.position) for child in self.current.children]

    def human_move(self, move: Move) -> MoveResult:
        """
        Play the human's move and, if the game goes on, the computer's
        reply. Illegal moves leave the game unchanged.
        """
        if self.current is None:
            raise ValueError("Session has not been started")
        if self.is_game_over():
            return MoveResult(legal=False, error="game_over")
        if self.current.position.turn is not self.human_color:
            return MoveResult(legal=False, error="not_your_turn")

        try:
            candidate = apply_move(self.current.position, move)
        except ValueError:
            return MoveResult(legal=False, error="illegal_move")
        next_node = find_legal_child(self.current, candidate)
        if next_node is None:
            return MoveResult(legal=False, error="illegal_move")

        self.current = next_node
        self.history.append(move)
        result = MoveResult(legal=True, move=str(move))

        # Covers a computer whose remaining replies have all been pruned
        if self.current.is_victory():
            self._finish(self.human_color)
            result.winner = self.human_color.name
            return result

        reply = self.computer_move()
        if reply is not None:
            result.reply = str(reply)
        if self.current.is_victory():
            self._finish(self.computer.color)
            result.winner = self.computer.color.name
        return result

    def computer_move(self) -> Optional[Move]:
        """Play a random unpruned move for the computer. None if it cannot move."""
        if self.current is None or self.current.position.turn is not self.computer.color:
            return None
        parent = self.current
        choice = self.computer.get_move(parent)
        if choice is None:
            return None
        move = derive_move(parent.position, choice.position)
        self._last_parent = parent
        self._last_choice = choice
        self.current = choice
        self.history.append(move)
        return move

    def _finish(self, winner: Color) -> None:
        self.stats.games_played += 1
        if winner is Color.WHITE:
            self.stats.white_wins += 1
        self._save_stats()
        if winner is self.human_color:
            self._learn()

    def _learn(self) -> None:
        """Forget the computer's last choice, in memory now and in the store in the background."""
        if self._last_parent is None or self._last_choice is None:
            return
        choice = self._last_choice
        removed = prune(self._last_parent, choice.position)
        logger.info("Pruned losing move %s (%d board(s))",
                    derive_move(self._last_parent.position, choice.position), removed)
        self._submit(self._persist_prune, choice)
        self._last_parent = None
        self._last_choice = None

    def _persist_prune(self, node: GameNode) -> int:
        # record_id is read here, after any pending insert assigned it
        if node.record_id is None:
            raise PersistenceError(f"Pruned board {node.position!r} has no stored record")
        return self.db.deactivate_subtree(node.position, node.record_id)

    def reset_ai(self) -> GameNode:
        """Reactivate every stored board, reload the tree and start a new game."""
        def reset():
            self.db.reset_all_active()
            return self.db.load_active_tree()

        self._check_open()
        root = self._executor.submit(reset).result()
        if root is None:
            root = generate(BitBoard.initial())
            self._store_new_tree(root)
        self.root = root
        self.new_game()
        logger.info("Computer's learning has been reset")
        return root

    def skill(self) -> int:
        """Skill percentage, read after every write submitted so far."""
        self._check_open()
        return self._executor.submit(self.db.get_skill).result()

    def reset_stats(self) -> None:
        """Zero the games played and wins, here and in the store."""
        self._check_open()
        self.stats = GameStats()
        self._submit(self.db.reset_stats)
        logger.info("Game statistics have been reset")

    def _save_stats(self) -> None:
        self._submit(self.db.save_stats, self.stats.games_played, self.stats.white_wins)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("Session is closed")

    def _submit(self, fn, *args) -> Future:
        self._check_open()
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_failure)
        with self._pending_lock:
            self._pending.append(future)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Background store write failed: %s", error)

    def flush(self) -> None:
        """Wait for every pending store write; re-raises the first failure."""
        with self._pending_lock:
            pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        if self._closed:
            return
        if self.root is not None:
            self._save_stats()
        self._closed = True
        self._executor.shutdown(wait=True)

    def to_dict(self) -> Dict[str, Any]:
        if self.current is None:
            raise ValueError("Session has not been started")
        winner = self.winner()
        return asdict(GameState(
            board=self.current.position.to_array().tolist(),
            turn=self.current.position.turn.name,
            game_over=self.is_game_over(),
            winner=winner.name if winner is not None else None,
            legal_moves=[str(move) for move in self.legal_moves()],
            move_history=[str(move) for move in self.history],
            games_played=self.stats.games_played,
            white_wins=self.stats.white_wins,
            black_wins=self.stats.black_wins,
            human_color=self.human_color.name,
        ))
