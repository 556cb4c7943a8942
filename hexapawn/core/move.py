"""
Translation between bitboards and human-facing moves.

A move is derived from the bit difference between a board and one of its
children, and a move entered by a player is turned back into a candidate
board that can be checked against the game tree.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from .bitboard import SIZE, BitBoard, Color, row_col, square

FILE_NAMES = "abc"

_MOVE_PATTERN = re.compile(r"^\s*([a-c][1-3])\s*[-x ]\s*([a-c][1-3])\s*$", re.IGNORECASE)


class MoveDerivationError(ValueError):
    """Raised when two boards are not a parent and one of its children."""


def square_name(row: int, col: int) -> str:
    """Algebraic name of a grid square, e.g. (0, 0) -> 'a3'."""
    return f"{FILE_NAMES[col]}{SIZE - row}"


def parse_square(name: str) -> Tuple[int, int]:
    """Grid (row, col) of an algebraic square name, e.g. 'b2' -> (1, 1)."""
    name = name.strip().lower()
    if len(name) != 2 or name[0] not in FILE_NAMES or not name[1].isdigit():
        raise ValueError(f"Invalid square: {name!r}")
    rank = int(name[1])
    if not 1 <= rank <= SIZE:
        raise ValueError(f"Invalid square: {name!r}")
    return SIZE - rank, FILE_NAMES.index(name[0])


@dataclass(frozen=True)
class Move:
    source_row: int
    source_col: int
    dest_row: int
    dest_col: int

    @classmethod
    def from_squares(cls, source: str, dest: str) -> "Move":
        source_row, source_col = parse_square(source)
        dest_row, dest_col = parse_square(dest)
        return cls(source_row, source_col, dest_row, dest_col)

    @classmethod
    def parse(cls, text: str) -> "Move":
        """Parse 'a1 a2', 'a1-a2' or 'b2xc3'."""
        match = _MOVE_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Cannot parse move: {text!r}")
        return cls.from_squares(match.group(1), match.group(2))

    @property
    def source(self) -> str:
        return square_name(self.source_row, self.source_col)

    @property
    def dest(self) -> str:
        return square_name(self.dest_row, self.dest_col)

    def is_diagonal(self) -> bool:
        return self.source_col != self.dest_col

    def __str__(self) -> str:
        return f"{self.source}{'x' if self.is_diagonal() else '-'}{self.dest}"


def derive_move(parent: BitBoard, child: BitBoard) -> Move:
    """
    Reconstruct the move that turned parent into child.

    The mover's bits are XOR-ed between the two boards to isolate exactly
    one source bit (present on the parent) and one destination bit
    (present on the child), one rank closer to the opponent.

    Raises:
        MoveDerivationError: if child is not one ply away from parent.
    """
    mover = parent.turn
    if child.turn is mover:
        raise MoveDerivationError(f"Both boards have {mover.name} to move")

    before = parent.pawns(mover)
    after = child.pawns(mover)
    diff = before ^ after
    source = diff & before
    dest = diff & after
    if bin(source).count("1") != 1 or bin(dest).count("1") != 1:
        raise MoveDerivationError(
            f"Boards differ by more than one {mover.name} pawn: {parent!r} -> {child!r}"
        )

    source_row, source_col = row_col(source)
    dest_row, dest_col = row_col(dest)
    # Rows grow towards rank 1: white moves up the grid, black moves down
    step = -1 if mover is Color.WHITE else 1
    if dest_row - source_row != step or abs(source_col - dest_col) > 1:
        raise MoveDerivationError(
            f"{square_name(source_row, source_col)} -> {square_name(dest_row, dest_col)} "
            f"is not a pawn move for {mover.name}"
        )

    opponent = mover.opponent()
    captured = parent.pawns(opponent) ^ child.pawns(opponent)
    if source_col == dest_col and captured:
        raise MoveDerivationError("Forward move removed an opponent pawn")
    if source_col != dest_col and captured != dest:
        raise MoveDerivationError("Diagonal move did not capture on the destination")

    return Move(source_row, source_col, dest_row, dest_col)


def apply_move(position: BitBoard, move: Move) -> BitBoard:
    """
    Build the candidate board produced by moving the pawn at the source
    square to the destination square. Whatever occupied the destination
    is replaced. The result is not checked for legality: look it up among
    the node's children for that.

    Raises:
        ValueError: if the source square does not hold a pawn of the side to move.
    """
    # Both calls reject off-board coordinates
    square(move.source_row, move.source_col)
    square(move.dest_row, move.dest_col)

    array = position.to_array()
    mover = position.turn
    if array[move.source_row, move.source_col] != mover:
        raise ValueError(f"No {mover.name.lower()} pawn on {move.source}")

    array[move.dest_row, move.dest_col] = array[move.source_row, move.source_col]
    array[move.source_row, move.source_col] = 0
    return BitBoard.from_array(array, mover.opponent())

