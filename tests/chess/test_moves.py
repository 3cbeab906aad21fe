"""Unit tests for chessmatch/chess/moves.py"""

import pytest

from chessmatch.chess.board import Board
from chessmatch.chess.moves import (
    MOVEMENT_RULES,
    Move,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    is_promotion_square,
)
from chessmatch.chess.square import Square
from chessmatch.core.exceptions import InvalidRequestError
from chessmatch.core.shared_types import Color, PieceType

EMPTY_PLACEMENT = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def targets(moves) -> set[str]:
    return {move.to_square.to_algebraic() for move in moves}


# --- UCI ---
def test_from_uci() -> None:
    move = Move.from_uci("e2e4")
    assert move.from_square == sq("e2")
    assert move.to_square == sq("e4")
    assert move.promotion is None
    assert move.to_uci() == "e2e4"


def test_from_uci_with_promotion() -> None:
    move = Move.from_uci("e7e8Q")
    assert move.promotion == PieceType.QUEEN
    assert move.to_uci() == "e7e8q"


@pytest.mark.parametrize("text", ["", "e2", "e2e", "e2e9", "z2e4", "e7e8k", "e7e8qq"])
def test_from_uci_rejects_garbage(text: str) -> None:
    with pytest.raises(InvalidRequestError):
        Move.from_uci(text)


def test_same_squares_ignores_details() -> None:
    parsed = Move.from_uci("d7d8q")
    generated = Move(sq("d7"), sq("d8"), piece_type=PieceType.PAWN)
    assert parsed.same_squares(generated)
    assert not parsed.same_squares(Move.from_uci("d7d6"))


# --- MOVEMENT RULES ---
def test_every_piece_type_has_a_rule() -> None:
    assert set(MOVEMENT_RULES) == set(PieceType)


def test_pawn_on_start_rank_single_and_double_push() -> None:
    board = Board.starting_position()
    assert targets(candidate_pawn_moves(sq("e2"), board)) == {"e3", "e4"}
    assert targets(candidate_pawn_moves(sq("d7"), board)) == {"d6", "d5"}


def test_pawn_blocked() -> None:
    board = Board.from_fen("8/8/8/8/4p3/8/4P3/8")
    # e3 free, e4 blocked --> only the single push
    assert targets(candidate_pawn_moves(sq("e2"), board)) == {"e3"}

    board = Board.from_fen("8/8/8/8/8/4p3/4P3/8")
    # blocked right in front: no double push through a piece either
    assert targets(candidate_pawn_moves(sq("e2"), board)) == set()


def test_pawn_captures_only_enemies_diagonally() -> None:
    board = Board.from_fen("8/8/8/3p1P2/4P3/8/8/8")
    moves = list(candidate_pawn_moves(sq("e4"), board))
    assert targets(moves) == {"e5", "d5"}
    capture = next(move for move in moves if move.to_square == sq("d5"))
    assert capture.captured == PieceType.PAWN


def test_pawn_reaching_last_rank_promotes_to_queen() -> None:
    board = Board.from_fen("8/P7/8/8/8/8/7p/8")
    white = list(candidate_pawn_moves(sq("a7"), board))
    black = list(candidate_pawn_moves(sq("h2"), board))
    assert [move.promotion for move in white] == [PieceType.QUEEN]
    assert [move.promotion for move in black] == [PieceType.QUEEN]
    assert is_promotion_square(sq("a8"), Color.WHITE)
    assert is_promotion_square(sq("h1"), Color.BLACK)
    assert not is_promotion_square(sq("h1"), Color.WHITE)


def test_knight_jumps_over_pieces() -> None:
    board = Board.starting_position()
    assert targets(candidate_knight_moves(sq("g1"), board)) == {"f3", "h3"}


def test_knight_in_the_corner() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/N7")
    assert targets(candidate_knight_moves(sq("a1"), board)) == {"b3", "c2"}


def test_rook_rays_stop_at_pieces() -> None:
    # own pawn on a3 blocks, enemy pawn on c1 can be captured
    board = Board.from_fen("8/8/8/8/8/P7/8/R1p5")
    assert targets(candidate_rook_moves(sq("a1"), board)) == {"a2", "b1", "c1"}


def test_queen_on_empty_board() -> None:
    board = Board.from_fen("8/8/8/8/3Q4/8/8/8")
    assert len(list(candidate_queen_moves(sq("d4"), board))) == 27


def test_king_single_steps() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/4K3")
    assert targets(candidate_king_moves(sq("e1"), board)) == {
        "d1",
        "f1",
        "d2",
        "e2",
        "f2",
    }


def test_empty_square_has_no_moves() -> None:
    board = Board.from_fen(EMPTY_PLACEMENT)
    assert list(candidate_king_moves(sq("e1"), board)) == []
    assert list(candidate_pawn_moves(sq("e2"), board)) == []
