"""The Board holds the `position` (in chess: the configuration of pieces on the board). Pure data + encode/decode."""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Self

from chessmatch.chess.moves import MOVEMENT_RULES, Move
from chessmatch.chess.pieces import FEN_TO_PIECE, Piece, PieceType
from chessmatch.chess.square import BOARD_DIMENSIONS, Square
from chessmatch.core.shared_types import Color

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
# A digit in a rank counts that many empty squares (never more than a full rank)
EMPTY_RUN_DIGITS = "".join(str(n) for n in range(1, BOARD_DIMENSIONS[0] + 1))


@dataclass
class Board:
    """Only occupied squares are stored. Any square missing from `position` is empty."""

    position: dict[Square, Piece] = field(default_factory=dict)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        Best effort: an unknown character counts as a single empty square, and anything beyond the 8th file is dropped.
        The caller is responsible for checking the number of ranks.
        """
        position: dict[Square, Piece] = {}
        num_files, num_ranks = BOARD_DIMENSIONS
        for rank_idx, fen_one_rank in enumerate(fen_str.split("/")[:num_ranks]):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = num_ranks - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if file >= num_files:
                    break
                if character.lower() in FEN_TO_PIECE:
                    position[Square(file, rank)] = Piece.from_fen(character)
                    file += 1
                elif character in EMPTY_RUN_DIGITS:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
                else:
                    file += 1
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_PLACEMENT)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        """None when that king is not on the board (tolerated, see `is_square_attacked`)."""
        king = Piece(PieceType.KING, color)
        return next(
            (square for square, piece in self.position.items() if piece == king),
            None,
        )

    def candidate_moves(self, square: Square) -> Iterator[Move]:
        """Pseudo-legal moves of whatever piece stands on the square, for that piece's own color."""
        piece = self.piece(square)
        if piece is None:
            return iter(())
        return MOVEMENT_RULES[piece.type](square, self)

    def is_square_attacked(self, square: Square, by_color: Color) -> bool:
        """Scan the candidate moves of every piece of `by_color` for one landing on `square`."""
        return any(
            move.to_square == square
            for attacker in self.locate_color(by_color)
            for move in self.candidate_moves(attacker)
        )

    def is_check(self, color: Color) -> bool:
        """A board without that king reports 'not in check'."""
        king = self.king_square(color)
        if king is None:
            return False
        return self.is_square_attacked(king, color.opponent)

    def move_piece(self, move: Move) -> None:
        """Update the position on the board (promotion included)"""
        piece_that_moved = self.position.pop(move.from_square)
        if move.promotion is not None:
            piece_that_moved = Piece(move.promotion, piece_that_moved.color)
        self.position[move.to_square] = piece_that_moved

    def unmove_piece(self, move: Move) -> None:
        """Exact reverse of `move_piece`: demotes a promoted piece and puts back what got captured"""
        piece_that_moved = self.position.pop(move.to_square)
        if move.promotion is not None:
            piece_that_moved = Piece(PieceType.PAWN, piece_that_moved.color)
        self.position[move.from_square] = piece_that_moved
        if move.captured is not None:
            self.position[move.to_square] = Piece(
                move.captured, piece_that_moved.color.opponent
            )
