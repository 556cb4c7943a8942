"""
Tests for the Hexapawn bitboard.
"""

import numpy as np
import pytest
from hexapawn.core.bitboard import (
    BitBoard, Color, FILE_A, FILE_B, FILE_C, RANK_1, RANK_2, RANK_3,
    next_file, next_rank, prev_file, prev_rank, row_col, square,
)


class TestMasks:
    """Rank and file masks derived by shifting."""

    def test_rank_masks(self):
        assert RANK_1 == 0b000000111
        assert RANK_2 == 0b000111000
        assert RANK_3 == 0b111000000
        assert prev_rank(RANK_3) == RANK_2
        assert next_rank(RANK_1) == RANK_2

    def test_file_masks(self):
        assert FILE_C == 0b001001001
        assert FILE_B == 0b010010010
        assert FILE_A == 0b100100100
        assert next_file(FILE_A) == FILE_B
        assert prev_file(FILE_C) == FILE_B

    def test_square_and_row_col(self):
        # (0, 0) is a3, the top left corner
        assert square(0, 0) == RANK_3 & FILE_A
        assert square(2, 2) == RANK_1 & FILE_C
        for row in range(3):
            for col in range(3):
                assert row_col(square(row, col)) == (row, col)

    def test_square_out_of_bounds(self):
        with pytest.raises(ValueError):
            square(3, 0)
        with pytest.raises(ValueError):
            square(0, -1)


class TestBitBoard:
    """Test suite for BitBoard functionality."""

    def test_initial(self):
        board = BitBoard.initial()
        assert board.black == RANK_3
        assert board.white == RANK_1
        assert board.turn is Color.WHITE

    def test_to_array(self):
        array = BitBoard.initial().to_array()
        expected = np.array([[1, 1, 1], [0, 0, 0], [-1, -1, -1]])
        assert array.shape == (3, 3)
        assert np.array_equal(array, expected)

    def test_from_array_round_trip(self):
        board = BitBoard(0b100010000, 0b000100001, Color.BLACK)
        rebuilt = BitBoard.from_array(board.to_array(), Color.BLACK)
        assert rebuilt == board
        assert rebuilt.black == board.black
        assert rebuilt.white == board.white

    def test_from_array_rejects_bad_cells(self):
        with pytest.raises(ValueError):
            BitBoard.from_array([[2, 0, 0], [0, 0, 0], [0, 0, 0]], Color.WHITE)
        with pytest.raises(ValueError):
            BitBoard.from_array([[0, 0], [0, 0]], Color.WHITE)

    def test_overlapping_pawns_rejected(self):
        with pytest.raises(ValueError):
            BitBoard(0b000010000, 0b000010000, Color.WHITE)

    def test_equality_ignores_turn(self):
        white_to_move = BitBoard(RANK_3, RANK_1, Color.WHITE)
        black_to_move = BitBoard(RANK_3, RANK_1, Color.BLACK)
        assert white_to_move == black_to_move
        assert hash(white_to_move) == hash(black_to_move)
        assert white_to_move != BitBoard(RANK_3, RANK_2, Color.WHITE)

    def test_immutable(self):
        board = BitBoard.initial()
        with pytest.raises(AttributeError):
            board.black = 0

    def test_get_pawn(self):
        board = BitBoard.initial()
        assert board.get_pawn(0, 1) == 1
        assert board.get_pawn(1, 1) == 0
        assert board.get_pawn(2, 1) == -1

    def test_str(self):
        text = str(BitBoard.initial())
        assert text.splitlines() == ["3 b b b", "2 . . .", "1 w w w", "  a b c"]

    def test_color_opponent(self):
        assert Color.WHITE.opponent() is Color.BLACK
        assert Color.BLACK.opponent() is Color.WHITE


class TestMoveGeneration:
    """One ply of move generation."""

    def test_initial_moves(self):
        children = BitBoard.initial().successors()
        # a1-a2, b1-b2, c1-c2 in generation order
        assert [child.white for child in children] == [0b000100011, 0b000010101, 0b000001110]
        assert all(child.black == RANK_3 for child in children)
        assert all(child.turn is Color.BLACK for child in children)

    def test_captures_and_forward(self):
        # Black on a3 and c3, white on b2 and c1, white to move
        board = BitBoard(0b101000000, 0b000010001, Color.WHITE)
        children = board.successors()
        expected = {
            BitBoard(0b101000000, 0b010000001, Color.BLACK),  # b2-b3
            BitBoard(0b001000000, 0b100000001, Color.BLACK),  # b2xa3
            BitBoard(0b100000000, 0b001000001, Color.BLACK),  # b2xc3
            BitBoard(0b101000000, 0b000011000, Color.BLACK),  # c1-c2
        }
        assert len(children) == 4
        assert set(children) == expected

    def test_edge_pawn_does_not_wrap(self):
        # White c2 must not capture across the edge onto black a2
        board = BitBoard(0b000100000, 0b000001000, Color.WHITE)
        children = board.successors()
        assert children == [BitBoard(0b000100000, 0b001000000, Color.BLACK)]

    def test_black_captures(self):
        # Black b3, white a2 and c2, black to move
        board = BitBoard(0b010000000, 0b000101000, Color.BLACK)
        children = board.successors()
        assert set(children) == {
            BitBoard(0b000010000, 0b000101000, Color.WHITE),  # b3-b2
            BitBoard(0b000100000, 0b000001000, Color.WHITE),  # b3xa2
            BitBoard(0b000001000, 0b000100000, Color.WHITE),  # b3xc2
        }

    def test_elimination_is_victory(self):
        board = BitBoard(0, 0b000010000, Color.BLACK)
        assert board.is_victory_condition()
        assert board.successors() == []
        assert board.winner() is Color.WHITE

    def test_home_rank_is_victory(self):
        board = BitBoard(0b001000000, 0b010000000, Color.BLACK)
        assert board.is_victory_condition()
        assert board.successors() == []
        assert board.winner() is Color.WHITE

    def test_black_reaching_rank_one(self):
        board = BitBoard(0b000000010, 0b000000001, Color.WHITE)
        assert board.is_victory_condition()
        assert board.winner() is Color.BLACK

    def test_blocked_side_loses(self):
        # White a2 facing black a3, nothing to capture
        board = BitBoard(0b100000000, 0b000100000, Color.WHITE)
        assert not board.is_victory_condition()
        assert board.successors() == []
        assert board.winner() is Color.BLACK

    def test_game_in_progress_has_no_winner(self):
        assert BitBoard.initial().winner() is None
