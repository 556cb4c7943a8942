"""
Bitboard representation for the 3x3 Hexapawn board.
Uses one 9-bit integer per color to mark pawn locations.
"""

from enum import IntEnum
from typing import Iterator, List, Optional, Tuple
import numpy as np

SIZE = 3


class Color(IntEnum):
    """Side to move / pawn occupant. Values match the numpy grid (0 = empty)."""

    BLACK = 1
    WHITE = -1

    def opponent(self) -> "Color":
        return Color.WHITE if self is Color.BLACK else Color.BLACK


def next_rank(rank: int) -> int:
    """Mask of the rank above the given one."""
    return rank << SIZE


def prev_rank(rank: int) -> int:
    """Mask of the rank below the given one."""
    return rank >> SIZE


def next_file(file: int) -> int:
    """Mask of the file to the right (towards file C)."""
    return file >> 1


def prev_file(file: int) -> int:
    """Mask of the file to the left (towards file A)."""
    return file << 1


# RANK 1    RANK 2    RANK 3
# 0 0 0     0 0 0     1 1 1
# 0 0 0     1 1 1     0 0 0
# 1 1 1     0 0 0     0 0 0
RANK_1 = 0b000000111
RANK_2 = next_rank(RANK_1)
RANK_3 = next_rank(RANK_2)

# FILE A    FILE B    FILE C
# 1 0 0     0 1 0     0 0 1
# 1 0 0     0 1 0     0 0 1
# 1 0 0     0 1 0     0 0 1
FILE_C = 0b001001001
FILE_B = prev_file(FILE_C)
FILE_A = prev_file(FILE_B)

# Grid order: row 0 is rank 3 (black home), col 0 is file A.
RANKS = (RANK_3, RANK_2, RANK_1)
FILES = (FILE_A, FILE_B, FILE_C)


def square(row: int, col: int) -> int:
    """Bit mask of the square at grid (row, col)."""
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise ValueError(f"Invalid position: ({row}, {col})")
    return RANKS[row] & FILES[col]


def row_col(mask: int) -> Tuple[int, int]:
    """Grid (row, col) of a single-bit square mask, found by rank/file scan."""
    for row, rank in enumerate(RANKS):
        if mask & rank:
            for col, file in enumerate(FILES):
                if mask & rank & file:
                    return row, col
    raise ValueError(f"Mask {mask:#011b} does not address a square")


def forward(mask: int, color: Color) -> int:
    """Shift a mask one rank towards the opponent's home rank."""
    if color is Color.WHITE:
        return next_rank(mask)
    return prev_rank(mask)


class BitBoard:
    """
    Immutable Hexapawn position.

    The white and black pawns are each represented by their own bit array:

        3 b b b
        2 . . .
        1 w w w
          a b c

        black: 111 000 000
        white: 000 000 111

    Two boards are equal when their pawn layouts are equal; the side to
    move is not part of equality.
    """

    __slots__ = ("_black", "_white", "_turn")

    def __init__(self, black: int, white: int, turn: Color):
        if black & white:
            raise ValueError(f"Overlapping pawns: black={black:#011b} white={white:#011b}")
        object.__setattr__(self, "_black", black)
        object.__setattr__(self, "_white", white)
        object.__setattr__(self, "_turn", Color(turn))

    def __setattr__(self, name, value):
        raise AttributeError("BitBoard is immutable")

    @classmethod
    def initial(cls) -> "BitBoard":
        """Standard start: black on rank 3, white on rank 1, white to move."""
        return cls(RANK_3, RANK_1, Color.WHITE)

    @classmethod
    def from_array(cls, array, turn: Color) -> "BitBoard":
        """Build a board from a 3x3 grid of 1 (black), -1 (white) and 0 (empty)."""
        grid = np.asarray(array)
        if grid.shape != (SIZE, SIZE):
            raise ValueError(f"Expected a {SIZE}x{SIZE} grid, got {grid.shape}")
        black = white = 0
        for row in range(SIZE):
            for col in range(SIZE):
                cell = int(grid[row, col])
                if cell == Color.BLACK:
                    black |= square(row, col)
                elif cell == Color.WHITE:
                    white |= square(row, col)
                elif cell != 0:
                    raise ValueError(f"Invalid cell value {cell} at ({row}, {col})")
        return cls(black, white, turn)

    @property
    def black(self) -> int:
        return self._black

    @property
    def white(self) -> int:
        return self._white

    @property
    def turn(self) -> Color:
        return self._turn

    def pawns(self, color: Color) -> int:
        return self._black if color is Color.BLACK else self._white

    def occupied(self) -> int:
        return self._black | self._white

    def get_pawn(self, row: int, col: int) -> int:
        """Occupant at (row, col): 1 for black, -1 for white, 0 if empty."""
        mask = square(row, col)
        if self._black & mask:
            return int(Color.BLACK)
        if self._white & mask:
            return int(Color.WHITE)
        return 0

    def to_array(self) -> np.ndarray:
        """
        3x3 grid of the board with screen-style coordinates:

              0 1 2
            0 . . .     <- rank 3
            1 . . .
            2 . . .     <- rank 1
        """
        array = np.zeros((SIZE, SIZE), dtype=np.int8)
        for row in range(SIZE):
            for col in range(SIZE):
                array[row, col] = self.get_pawn(row, col)
        return array

    def is_victory_condition(self) -> bool:
        """
        Check the victory conditions that end generation before any move
        is considered: a side has been eliminated, or a pawn already sits
        on the opponent's home rank. The third condition (side to move has
        no moves) follows from generation producing no children.
        """
        if self._white == 0 or self._black == 0:
            return True
        if self._white & RANK_3 or self._black & RANK_1:
            return True
        return False

    def winner(self) -> Optional[Color]:
        """Winner of a finished position, or None while moves remain."""
        if self.is_victory_condition() or not self.successors():
            return self._turn.opponent()
        return None

    def _pawn_masks(self, color: Color) -> Iterator[Tuple[int, int]]:
        bits = self.pawns(color)
        for rank in RANKS:
            for file in FILES:
                pawn = rank & file & bits
                if pawn:
                    yield pawn, file

    def _child(self, mover: Color, pawn: int, dest: int) -> "BitBoard":
        mine = self.pawns(mover) ^ pawn | dest
        theirs = self.pawns(mover.opponent()) & ~dest
        if mover is Color.BLACK:
            return BitBoard(mine, theirs, Color.WHITE)
        return BitBoard(theirs, mine, Color.BLACK)

    def successors(self) -> List["BitBoard"]:
        """All boards reachable by one legal move, in generation order."""
        if self.is_victory_condition():
            return []

        mover = self._turn
        enemy = self.pawns(mover.opponent())
        children = []
        for pawn, file in self._pawn_masks(mover):
            ahead = forward(pawn, mover)
            # Forward move: the square ahead must be empty of both colors
            if ahead and not ahead & self.occupied():
                children.append(self._child(mover, pawn, ahead))
            # Diagonal captures need an opponent pawn on the destination
            if file != FILE_A:
                left = prev_file(ahead)
                if left & enemy:
                    children.append(self._child(mover, pawn, left))
            if file != FILE_C:
                right = next_file(ahead)
                if right & enemy:
                    children.append(self._child(mover, pawn, right))
        return children

    def __eq__(self, other) -> bool:
        if not isinstance(other, BitBoard):
            return NotImplemented
        return self._black == other._black and self._white == other._white

    def __hash__(self) -> int:
        return hash((self._black, self._white))

    def __repr__(self) -> str:
        return f"BitBoard(black={self._black:#011b}, white={self._white:#011b}, turn={self._turn.name})"

    def __str__(self) -> str:
        symbols = {int(Color.BLACK): "b", int(Color.WHITE): "w", 0: "."}
        lines = []
        for row in range(SIZE):
            cells = " ".join(symbols[self.get_pawn(row, col)] for col in range(SIZE))
            lines.append(f"{SIZE - row} {cells}")
        lines.append("  a b c")
        return "\n".join(lines)
