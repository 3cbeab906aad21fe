"""
Representation of a single position on the board: the piece placement + the color to move.

A trimmed-down FEN string ("FEN-like"):

<board placement string> <active color>

ex) The standard starting position:
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w

Full FEN strings are accepted as input; the castling / en passant / clock fields are ignored.
"""

from dataclasses import dataclass
from typing import Optional, Self

from chessmatch.chess.board import EMPTY_RUN_DIGITS, STARTING_PLACEMENT, Board
from chessmatch.chess.pieces import FEN_TO_PIECE
from chessmatch.chess.square import BOARD_DIMENSIONS
from chessmatch.core.shared_types import Color

STARTING_FEN = f"{STARTING_PLACEMENT} w"
COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in COLOR_CODES.items()}


def is_valid_position(position: str) -> bool:
    """Strict check of the placement part: 8 ranks, 8 files each, only piece letters and digits."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character in EMPTY_RUN_DIGITS:
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_fen_like(fen: str) -> bool:
    """Strict version of what `FENState.parse` tolerates."""
    parts = fen.split()
    if not parts:
        return False
    if not is_valid_position(parts[0]):
        return False
    return len(parts) == 1 or is_valid_color_code(parts[1])


@dataclass
class FENState:
    """Placement + color to move"""

    board: Board
    color_to_move: Color

    @classmethod
    def parse(cls, fen: str) -> Optional[Self]:
        """
        Lenient parsing.
        ---

        Returns None (instead of raising) when the rank count is wrong or the active color is neither 'w' nor 'b'.
        Inside a rank, characters that are not understood are read as empty squares.
        A missing active color means white to move.
        """
        parts = fen.split()
        if not parts:
            return None

        placement = parts[0]
        if len(placement.split("/")) != BOARD_DIMENSIONS[1]:
            return None

        color_code = parts[1] if len(parts) > 1 else "w"
        if not is_valid_color_code(color_code):
            return None

        return cls(Board.from_fen(placement), COLOR_CODES[color_code])

    def to_fen(self) -> str:
        return f"{self.board.to_fen()} {COLOR_TO_CODE[self.color_to_move]}"

    @classmethod
    def starting_position(cls) -> Self:
        return cls(Board.starting_position(), Color.WHITE)
