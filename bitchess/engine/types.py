"""Colours, occupancy-set indices and castling flags."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Final, Tuple


class Color(str, Enum):
    """Side colour; values match the FEN side-to-move field."""

    WHITE = "w"
    BLACK = "b"

    @property
    def other(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


# Occupancy-set indices. Index order is also the lookup priority for piece_at().
WP, WR, WN, WB, WQ, WK, BP, BR, BN, BB, BQ, BK = range(12)
PIECE_COUNT: Final = 12

WHITE_PIECES: Tuple[int, ...] = (WP, WR, WN, WB, WQ, WK)
BLACK_PIECES: Tuple[int, ...] = (BP, BR, BN, BB, BQ, BK)

PIECE_TO_CHAR: Dict[int, str] = {
    WP: "P",
    WR: "R",
    WN: "N",
    WB: "B",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BR: "r",
    BN: "n",
    BB: "b",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE: Dict[str, int] = {v: k for k, v in PIECE_TO_CHAR.items()}

CASTLE_WK: Final = 1
CASTLE_WQ: Final = 2
CASTLE_BK: Final = 4
CASTLE_BQ: Final = 8
CASTLE_ALL: Final = CASTLE_WK | CASTLE_WQ | CASTLE_BK | CASTLE_BQ


def color_of(piece: int) -> Color:
    return Color.WHITE if piece < BP else Color.BLACK


def pieces_for(color: Color) -> Tuple[int, ...]:
    return WHITE_PIECES if color is Color.WHITE else BLACK_PIECES
