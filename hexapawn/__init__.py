"""Hexapawn

A 3x3 pawn game played against a computer opponent that learns by
permanently forgetting every move that once led to its defeat.

Main Components:
- core: bitboards, the eagerly generated game tree, move translation
- db: SQLite mirror of the game tree with an `active` flag per board
- skill: percentage of the computer's losing lines pruned so far
- session: one player's game against the learning computer

Quick Start:
    from hexapawn import Database, GameSession
    from hexapawn.core import Move

    with GameSession(Database("hexapawn.db")) as session:
        result = session.human_move(Move.parse("b1 b2"))
        print(session.skill())
"""

from .db import Database, PersistenceError
from .session import GameSession, MoveResult
from .skill import skill_percentage

__version__ = "1.0.0"

__all__ = ['Database', 'PersistenceError', 'GameSession', 'MoveResult', 'skill_percentage']
