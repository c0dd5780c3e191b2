from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .bits import lsb_index
from .types import PIECE_TO_CHAR


PROMOTION_PIECES = {"q", "r", "b", "n"}


class MoveKind(IntEnum):
    """Closed set of state transitions understood by ``apply_move``."""

    SINGLE_PUSH = 0
    DOUBLE_PUSH = 1
    SLIDE = 2  # quiet move of a rook, knight, bishop, queen or king
    CAPTURE = 3
    EN_PASSANT = 4
    CASTLE_WK = 5
    CASTLE_WQ = 6
    CASTLE_BK = 7
    CASTLE_BQ = 8


CASTLE_KINDS = frozenset(
    {MoveKind.CASTLE_WK, MoveKind.CASTLE_WQ, MoveKind.CASTLE_BK, MoveKind.CASTLE_BQ}
)


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        kind (MoveKind): Transition applied by the controller.
        piece (int): Occupancy-set index of the moving piece.
        from_mask (int): Single-bit mask of the origin square.
        to_mask (int): Single-bit mask of the destination square.
        promotion (Optional[int]): Occupancy-set index of the promoted piece,
            or ``None`` when the move is not a promotion.
    """

    kind: MoveKind
    piece: int
    from_mask: int
    to_mask: int
    promotion: Optional[int] = None

    @property
    def from_sq(self) -> int:
        return lsb_index(self.from_mask)

    @property
    def to_sq(self) -> int:
        return lsb_index(self.to_mask)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = PIECE_TO_CHAR[self.promotion].lower() if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_uci(uci: str) -> Tuple[int, int, Optional[str]]:
    """Parse a UCI move string into its squares and promotion letter.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Tuple[int, int, Optional[str]]: Origin square, destination square and
            lowercase promotion letter (``None`` when absent).

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return from_sq, to_sq, promo


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
