import pytest
from hexapawn.core.bitboard import BitBoard
from hexapawn.core.game_tree import find_legal_child, generate
from hexapawn.core.move import Move, apply_move
from hexapawn.db import Database
from hexapawn.session import GameSession


class FirstChoice:
    """Stands in for random.Random: the computer always plays its first remaining move."""

    def randrange(self, n):
        return 0


def follow(root, moves):
    """Walk a line of moves down the tree; None as soon as one is not a child."""
    node = root
    for text in moves:
        node = find_legal_child(node, apply_move(node.position, Move.parse(text)))
        if node is None:
            return None
    return node


@pytest.fixture
def tree():
    return generate(BitBoard.initial())


@pytest.fixture
def db(tmp_path):
    return Database(str(tmp_path / "hexapawn.db"))


@pytest.fixture
def session(db):
    session = GameSession(db, rng=FirstChoice())
    session.start()
    session.flush()
    yield session
    session.close()
