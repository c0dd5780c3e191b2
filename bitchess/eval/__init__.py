"""Static evaluation.

Pure, deterministic, and side-effect free. Scores are from Black's point of
view: positive favours Black, negative favours White.
"""

from __future__ import annotations

from typing import Final

from bitchess.engine.bits import popcount
from bitchess.engine.board import Position
from bitchess.engine.types import BB, BK, BN, BP, BQ, BR, WB, WK, WN, WP, WQ, WR


# Material weights in pawns
KING_VAL: Final = 200
QUEEN_VAL: Final = 9
ROOK_VAL: Final = 5
BISHOP_VAL: Final = 3
KNIGHT_VAL: Final = 3
PAWN_VAL: Final = 1

_WEIGHTED_PAIRS: Final = (
    (KING_VAL, BK, WK),
    (QUEEN_VAL, BQ, WQ),
    (ROOK_VAL, BR, WR),
    (BISHOP_VAL, BB, WB),
    (KNIGHT_VAL, BN, WN),
    (PAWN_VAL, BP, WP),
)


def evaluate(position: Position) -> int:
    """Return the material balance of ``position`` from Black's perspective."""
    p = position.pieces
    return sum(
        weight * (popcount(p[black]) - popcount(p[white]))
        for weight, black, white in _WEIGHTED_PAIRS
    )
