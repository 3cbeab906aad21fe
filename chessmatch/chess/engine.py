"""
The RulesEngine implements all rules that affect the position: legal move generation, check detection,
end-of-game detection, applying/undoing moves and (de)serializing the position.

Castling and en passant are not part of these rules, and the only draw is stalemate.
"""

import logging
from typing import Iterator, Optional, Union

from chessmatch.chess.board import Board
from chessmatch.chess.fen import FENState
from chessmatch.chess.moves import Move
from chessmatch.chess.pieces import Piece, PieceType
from chessmatch.chess.square import Square
from chessmatch.core.exceptions import InvalidRequestError
from chessmatch.core.shared_types import Color

logger = logging.getLogger(__name__)


class RulesEngine:
    def __init__(self) -> None:
        self._board = Board()
        self._color_to_move = Color.WHITE
        self._history: list[Move] = []
        self.reset()

    # --- READ ACCESS ---
    @property
    def board(self) -> Board:
        return self._board

    @property
    def side_to_move(self) -> Color:
        return self._color_to_move

    @property
    def history(self) -> tuple[Move, ...]:
        return tuple(self._history)

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self._board.piece(square)

    # --- SETUP ---
    def reset(self) -> None:
        """Standard starting position, white to move, no history."""
        state = FENState.starting_position()
        self._board = state.board
        self._color_to_move = state.color_to_move
        self._history = []

    def load_position(self, fen_like: str) -> bool:
        """
        Load a placement + side to move.
        ----

        Returns False (and leaves the engine untouched) if the string cannot be read, see `FENState.parse` for how lenient that is.
        """
        state = FENState.parse(fen_like)
        if state is None:
            logger.debug("Rejected position %r", fen_like)
            return False

        self._board = state.board
        self._color_to_move = state.color_to_move
        self._history = []
        return True

    def serialize(self) -> str:
        return FENState(self._board, self._color_to_move).to_fen()

    # --- MOVE GENERATION ---
    def pseudo_moves(self, square: Square) -> Iterator[Move]:
        """
        Geometrically valid moves for the piece on the square, ignoring whether they leave the own king in check.

        Only the side to move has pseudo moves. Every call returns a fresh generator.
        """
        piece = self._board.piece(square)
        if piece is None or piece.color != self._color_to_move:
            return iter(())
        return self._board.candidate_moves(square)

    def legal_moves(self, square: Optional[Square] = None) -> list[Move]:
        """
        List of legal moves for the side to move (optionally: only for the piece on one square)
        ----

        1. generate pseudo moves, using the basic movement rules for all pieces
        2. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        """
        squares = (
            [square]
            if square is not None
            else self._board.locate_color(self._color_to_move)
        )
        # materialize first: the legality simulation mutates the board the generators read from
        candidates = [
            move for from_square in squares for move in self.pseudo_moves(from_square)
        ]
        return [
            move for move in candidates if not self._is_putting_yourself_in_check(move)
        ]

    # --- MAKING MOVES ---
    def apply_move(self, move: Union[Move, str]) -> Optional[Move]:
        """
        Attempt to make a move
        -----

        Text input is parsed first (unparseable text is simply not a legal move).
        The move gets resolved against the legal moves: same squares, and the same promotion if one was asked for.
        Any requested promotion piece is replaced by a queen (the only promotion the engine knows).

        Returns the resolved move, or None if nothing matched (board untouched in that case).
        """
        if isinstance(move, str):
            try:
                move = Move.from_uci(move)
            except InvalidRequestError:
                return None

        requested_promotion = (
            PieceType.QUEEN if move.promotion is not None else None
        )
        resolved = next(
            (
                legal
                for legal in self.legal_moves(move.from_square)
                if legal.same_squares(move)
                and (requested_promotion is None or legal.promotion == requested_promotion)
            ),
            None,
        )
        if resolved is None:
            return None

        self._make(resolved)
        return resolved

    def undo_last_move(self) -> Optional[Move]:
        """Take back the most recent move. None if there is nothing to take back."""
        if not self._history:
            return None
        move = self._history[-1]
        self._unmake(move)
        return move

    # --- CHECKS FOR ENDING THE GAME ---
    def is_in_check(self, color: Color) -> bool:
        return self._board.is_check(color)

    def has_legal_move(self) -> bool:
        return len(self.legal_moves()) > 0

    def is_checkmate(self) -> bool:
        return self.is_in_check(self._color_to_move) and not self.has_legal_move()

    def is_stalemate(self) -> bool:
        return not self.is_in_check(self._color_to_move) and not self.has_legal_move()

    def is_game_over(self) -> bool:
        return not self.has_legal_move()

    # -- PRIVATE HELPERS ---
    def _make(self, move: Move) -> None:
        self._board.move_piece(move)
        self._history.append(move)
        self._color_to_move = self._color_to_move.opponent

    def _unmake(self, move: Move) -> None:
        self._history.pop()
        self._board.unmove_piece(move)
        self._color_to_move = self._color_to_move.opponent

    def _is_putting_yourself_in_check(self, move: Move) -> bool:
        """Return True if the move leaves the mover's king attacked

        plan:
        1. make the candidate move
        2. determine if king is in check on the new board
        3. take the move back
        """
        mover = self._color_to_move
        self._make(move)
        try:
            return self._board.is_check(mover)
        finally:
            self._unmake(move)
