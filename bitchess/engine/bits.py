"""Bit-plane helpers shared by the attack and move generators.

Squares are 0..63 (a1=0 .. h8=63). Shifts are raw: they do not mask files,
so callers apply the guard matching the direction of travel.
"""

from __future__ import annotations

from typing import Final, Iterator


MASK64: Final = 0xFFFFFFFFFFFFFFFF

NOT_A_FILE: Final = 0xFEFEFEFEFEFEFEFE
NOT_H_FILE: Final = 0x7F7F7F7F7F7F7F7F
NOT_AB_FILE: Final = 0xFCFCFCFCFCFCFCFC
NOT_GH_FILE: Final = 0x3F3F3F3F3F3F3F3F

RANK_1: Final = 0x00000000000000FF
RANK_2: Final = 0x000000000000FF00
RANK_3: Final = 0x0000000000FF0000
RANK_4: Final = 0x00000000FF000000
RANK_5: Final = 0x000000FF00000000
RANK_6: Final = 0x0000FF0000000000
RANK_7: Final = 0x00FF000000000000
RANK_8: Final = 0xFF00000000000000


# King directions
def north(b: int) -> int:
    return (b << 8) & MASK64


def south(b: int) -> int:
    return b >> 8


def east(b: int) -> int:
    return (b << 1) & MASK64


def west(b: int) -> int:
    return b >> 1


def north_east(b: int) -> int:
    return (b << 9) & MASK64


def north_west(b: int) -> int:
    return (b << 7) & MASK64


def south_east(b: int) -> int:
    return b >> 7


def south_west(b: int) -> int:
    return b >> 9


# Knight jumps
def no_no_ea(b: int) -> int:
    return (b << 17) & MASK64


def no_no_we(b: int) -> int:
    return (b << 15) & MASK64


def no_ea_ea(b: int) -> int:
    return (b << 10) & MASK64


def no_we_we(b: int) -> int:
    return (b << 6) & MASK64


def so_so_ea(b: int) -> int:
    return b >> 15


def so_so_we(b: int) -> int:
    return b >> 17


def so_ea_ea(b: int) -> int:
    return b >> 6


def so_we_we(b: int) -> int:
    return b >> 10


def popcount(bb: int) -> int:
    return bb.bit_count()


def iter_bits(bb: int) -> Iterator[int]:
    """Yield each set bit of ``bb`` as an isolated single-bit mask, low to high."""
    while bb:
        lsb = bb & -bb
        yield lsb
        bb ^= lsb


def lsb_index(bb: int) -> int:
    """Return the index of the lowest set bit, or -1 for an empty set."""
    if bb == 0:
        return -1
    return (bb & -bb).bit_length() - 1


def square_mask(sq: int) -> int:
    """Return the single-bit mask for square ``sq``.

    Raises:
        ValueError: If ``sq`` is outside 0..63.
    """
    if sq < 0 or sq > 63:
        raise ValueError(f"invalid square index: {sq}")
    return 1 << sq
