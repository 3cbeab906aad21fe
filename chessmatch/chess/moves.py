"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define the pseudo-legal move sets for each piece type.
Every rule is a generator, so callers can stop early (attack detection only needs the first hit).


Legality is checked later by the RulesEngine
"""

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Protocol, Self

from chessmatch.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece, PieceType
from chessmatch.chess.square import BOARD_DIMENSIONS, Square, is_valid_square
from chessmatch.core.exceptions import InvalidRequestError
from chessmatch.core.shared_types import Color


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]

PROMOTION_LETTERS = "nbrq"


@dataclass(frozen=True)
class Move:
    """
    A move is a value: it never changes after creation.

    Moves parsed from text only know their squares (and maybe a promotion).
    Moves produced by the movement rules also record the moving piece and what it captures, which is what undo needs.
    """

    from_square: Square
    to_square: Square
    piece_type: Optional[PieceType] = None
    captured: Optional[PieceType] = None
    promotion: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        if len(uci) not in (4, 5):
            raise InvalidRequestError(f"Cannot interpret {uci!r} as a move.")
        if not (is_valid_square(uci[:2]) and is_valid_square(uci[2:4])):
            raise InvalidRequestError(f"Cannot interpret {uci!r} as a move.")

        promotion = None
        if len(uci) == 5:
            if uci[4].lower() not in PROMOTION_LETTERS:
                raise InvalidRequestError(f"Unknown promotion piece in {uci!r}.")
            promotion = FEN_TO_PIECE[uci[4].lower()]

        return cls(
            Square.from_algebraic(uci[:2]),
            Square.from_algebraic(uci[2:4]),
            promotion=promotion,
        )

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def same_squares(self, other: "Move") -> bool:
        return (self.from_square, self.to_square) == (
            other.from_square,
            other.to_square,
        )


def _move_to(
    square: Square, target: Square, mover: Piece, board: Board
) -> Move:
    target_piece = board.piece(target)
    return Move(
        from_square=square,
        to_square=target,
        piece_type=mover.type,
        captured=target_piece.type if target_piece else None,
    )


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> Iterator[Move]:
    """
    Raycasting algorithm
    -----

    We define move directions and move along them until we hit another piece or
    the edge of the board. The first enemy piece on the ray can be captured, an own piece blocks.
    """
    mover = board.piece(square)
    if mover is None:
        return

    for df, dr in directions:
        target = square.offset(df, dr)
        while target.is_within_bounds():
            occupant = board.piece(target)
            if occupant is not None:
                if occupant.color != mover.color:
                    yield _move_to(square, target, mover, board)
                break
            yield _move_to(square, target, mover, board)
            target = target.offset(df, dr)


def single_step_move(
    square: Square, board: Board, deltas: list[Vector]
) -> Iterator[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    mover = board.piece(square)
    if mover is None:
        return

    for df, dr in deltas:
        target = square.offset(df, dr)
        if not target.is_within_bounds():
            continue

        occupant = board.piece(target)
        if occupant is None or occupant.color != mover.color:
            yield _move_to(square, target, mover, board)


def candidate_pawn_moves(square: Square, board: Board) -> Iterator[Move]:
    """
    A pawn:
    - moves by a single square forward, only onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally, only onto a square holding an enemy piece

    NOTE: Reaching the last rank always promotes to a queen.
    """
    pawn = board.piece(square)
    if pawn is None:
        return

    # White moves up the board, Black moves down the board
    forward = 1 if pawn.color == Color.WHITE else -1
    start_rank = 1 if pawn.color == Color.WHITE else BOARD_DIMENSIONS[1] - 2

    candidates: list[Move] = []
    one_step = square.offset(0, forward)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        candidates.append(_move_to(square, one_step, pawn, board))

        two_steps = square.offset(0, 2 * forward)
        if square.rank == start_rank and board.piece(two_steps) is None:
            candidates.append(_move_to(square, two_steps, pawn, board))

    for df in (-1, 1):
        target = square.offset(df, forward)
        if not target.is_within_bounds():
            continue
        occupant = board.piece(target)
        if occupant is not None and occupant.color != pawn.color:
            candidates.append(_move_to(square, target, pawn, board))

    for move in candidates:
        if is_promotion_square(move.to_square, pawn.color):
            yield promote_to_queen(move)
        else:
            yield move


def candidate_knight_moves(square: Square, board: Board) -> Iterator[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    knight_deltas: list[Vector] = [
        (2, 1),
        (2, -1),
        (-2, 1),
        (-2, -1),
        (1, 2),
        (1, -2),
        (-1, 2),
        (-1, -2),
    ]
    return single_step_move(square, board, knight_deltas)


def candidate_bishop_moves(square: Square, board: Board) -> Iterator[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    diagonals: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
    return raycasting_move(square, board, diagonals)


def candidate_rook_moves(square: Square, board: Board) -> Iterator[Move]:
    """Rooks move either horizontally or vertically"""
    straights: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
    return raycasting_move(square, board, straights)


def candidate_queen_moves(square: Square, board: Board) -> Iterator[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    yield from candidate_bishop_moves(square, board)
    yield from candidate_rook_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> Iterator[Move]:
    """
    The king can move by a single square at the time. No castling.
    """
    king_deltas: list[Vector] = [
        (0, 1),
        (0, -1),
        (1, 0),
        (-1, 0),
        (1, 1),
        (1, -1),
        (-1, 1),
        (-1, -1),
    ]
    return single_step_move(square, board, king_deltas)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], Iterator[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# -- PAWN PROMOTION MOVES --
def is_promotion_square(square: Square, color: Color) -> bool:
    """White promotes on the final rank, black on the first rank"""
    last_rank = BOARD_DIMENSIONS[1] - 1 if color == Color.WHITE else 0
    return square.rank == last_rank


def promote_to_queen(pawn_move: Move) -> Move:
    """The only promotion on offer: always a queen, whatever the player asked for."""
    return Move(
        from_square=pawn_move.from_square,
        to_square=pawn_move.to_square,
        piece_type=pawn_move.piece_type,
        captured=pawn_move.captured,
        promotion=PieceType.QUEEN,
    )
