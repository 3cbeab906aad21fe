"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

from chessmatch.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]
RANK_NAMES = "".join(str(rank) for rank in range(1, BOARD_DIMENSIONS[1] + 1))


def is_valid_square(sq: str) -> bool:
    """Valid square should be a letter for the file + a digit for the rank, nothing more."""
    if len(sq) != 2:
        return False
    file_char, rank_char = sq[0], sq[1]
    return file_char in FILE_NAMES and rank_char in RANK_NAMES


@dataclass(frozen=True)
class Square:
    """Zero-based coordinates: file 0 is the a-file, rank 0 is the 1st rank."""

    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if not is_valid_square(sq):
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square.")
        return cls(FILE_NAMES.index(sq[0]), RANK_NAMES.index(sq[1]))

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        return Square(self.file + df, self.rank + dr)
