"""Unit tests for chessmatch/chess/pieces.py"""

import pytest

from chessmatch.chess.pieces import Piece
from chessmatch.core.shared_types import Color, PieceType


@pytest.mark.parametrize(
    "character, piece_type, color",
    [
        ("P", PieceType.PAWN, Color.WHITE),
        ("n", PieceType.KNIGHT, Color.BLACK),
        ("B", PieceType.BISHOP, Color.WHITE),
        ("r", PieceType.ROOK, Color.BLACK),
        ("Q", PieceType.QUEEN, Color.WHITE),
        ("k", PieceType.KING, Color.BLACK),
    ],
)
def test_piece_from_fen(character: str, piece_type: PieceType, color: Color) -> None:
    piece = Piece.from_fen(character)
    assert piece == Piece(piece_type, color)
    assert piece.to_fen() == character


def test_unknown_piece_letter() -> None:
    with pytest.raises(KeyError):
        Piece.from_fen("x")


def test_color_opponent() -> None:
    assert Color.WHITE.opponent == Color.BLACK
    assert Color.BLACK.opponent == Color.WHITE
