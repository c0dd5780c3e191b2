"""Attack sets for each piece kind.

Pure functions over bitboards. Slider walks take the set of empty squares and
stop on the first occupied square, which is included so it can be captured.
"""

from __future__ import annotations

from typing import Callable, Tuple

from .bits import (
    NOT_A_FILE,
    NOT_AB_FILE,
    NOT_GH_FILE,
    NOT_H_FILE,
    MASK64,
    east,
    no_ea_ea,
    no_no_ea,
    no_no_we,
    no_we_we,
    north,
    north_east,
    north_west,
    so_ea_ea,
    so_so_ea,
    so_so_we,
    so_we_we,
    south,
    south_east,
    south_west,
    west,
)


# (shift, guard) pairs; the guard removes squares that wrapped across the board edge
ROOK_RAYS: Tuple[Tuple[Callable[[int], int], int], ...] = (
    (north, MASK64),
    (south, MASK64),
    (east, NOT_A_FILE),
    (west, NOT_H_FILE),
)
BISHOP_RAYS: Tuple[Tuple[Callable[[int], int], int], ...] = (
    (north_east, NOT_A_FILE),
    (south_east, NOT_A_FILE),
    (north_west, NOT_H_FILE),
    (south_west, NOT_H_FILE),
)


def white_pawn_attacks(pawns: int) -> int:
    return (north_east(pawns) & NOT_A_FILE) | (north_west(pawns) & NOT_H_FILE)


def black_pawn_attacks(pawns: int) -> int:
    return (south_east(pawns) & NOT_A_FILE) | (south_west(pawns) & NOT_H_FILE)


def knight_attacks(knights: int) -> int:
    """Return every square reachable by a knight jump from any bit in ``knights``."""
    return (
        (no_no_ea(knights) & NOT_A_FILE)
        | (so_so_ea(knights) & NOT_A_FILE)
        | (no_no_we(knights) & NOT_H_FILE)
        | (so_so_we(knights) & NOT_H_FILE)
        | (no_ea_ea(knights) & NOT_AB_FILE)
        | (so_ea_ea(knights) & NOT_AB_FILE)
        | (no_we_we(knights) & NOT_GH_FILE)
        | (so_we_we(knights) & NOT_GH_FILE)
    )


def king_attacks(king: int) -> int:
    return (
        north(king)
        | south(king)
        | (east(king) & NOT_A_FILE)
        | (west(king) & NOT_H_FILE)
        | (north_east(king) & NOT_A_FILE)
        | (south_east(king) & NOT_A_FILE)
        | (north_west(king) & NOT_H_FILE)
        | (south_west(king) & NOT_H_FILE)
    )


def _walk(piece: int, empty: int, rays: Tuple[Tuple[Callable[[int], int], int], ...]) -> int:
    attacks = 0
    for shift, guard in rays:
        slide = piece
        while slide:
            slide = shift(slide) & guard
            attacks |= slide
            if not (slide & empty):
                break
    return attacks


def rook_attacks(piece: int, empty: int) -> int:
    """Return rook attacks for a single-bit ``piece`` given the ``empty`` squares."""
    return _walk(piece, empty, ROOK_RAYS)


def bishop_attacks(piece: int, empty: int) -> int:
    """Return bishop attacks for a single-bit ``piece`` given the ``empty`` squares."""
    return _walk(piece, empty, BISHOP_RAYS)


def queen_attacks(piece: int, empty: int) -> int:
    return _walk(piece, empty, ROOK_RAYS) | _walk(piece, empty, BISHOP_RAYS)
