from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .attacks import (
    bishop_attacks,
    black_pawn_attacks,
    king_attacks,
    knight_attacks,
    queen_attacks,
    rook_attacks,
    white_pawn_attacks,
)
from .bits import (
    MASK64,
    NOT_A_FILE,
    NOT_H_FILE,
    RANK_1,
    RANK_4,
    RANK_5,
    RANK_8,
    east,
    iter_bits,
    lsb_index,
    north,
    north_east,
    north_west,
    south,
    south_east,
    south_west,
    west,
)
from .move import Move, MoveKind, square_to_str, str_to_square
from .types import (
    BB,
    BK,
    BN,
    BP,
    BQ,
    BR,
    CASTLE_ALL,
    CASTLE_BK,
    CASTLE_BQ,
    CASTLE_WK,
    CASTLE_WQ,
    CHAR_TO_PIECE,
    PIECE_COUNT,
    PIECE_TO_CHAR,
    WB,
    WK,
    WN,
    WP,
    WQ,
    WR,
    Color,
    pieces_for,
)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

START_PIECES: Tuple[int, ...] = (
    0x000000000000FF00,  # WP
    0x0000000000000081,  # WR
    0x0000000000000042,  # WN
    0x0000000000000024,  # WB
    0x0000000000000008,  # WQ
    0x0000000000000010,  # WK
    0x00FF000000000000,  # BP
    0x8100000000000000,  # BR
    0x4200000000000000,  # BN
    0x2400000000000000,  # BB
    0x0800000000000000,  # BQ
    0x1000000000000000,  # BK
)

_CASTLING_CHARS = ((CASTLE_WK, "K"), (CASTLE_WQ, "Q"), (CASTLE_BK, "k"), (CASTLE_BQ, "q"))


@dataclass(frozen=True)
class CastleRule:
    """Fixed geometry of one castling corner."""

    kind: MoveKind
    color: Color
    right: int
    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    between: int  # must be empty
    king_path: int  # must not be attacked: start, transit and destination


CASTLE_RULES: Tuple[CastleRule, ...] = (
    CastleRule(MoveKind.CASTLE_WK, Color.WHITE, CASTLE_WK, 0x10, 0x40, 0x80, 0x20, 0x60, 0x70),
    CastleRule(MoveKind.CASTLE_WQ, Color.WHITE, CASTLE_WQ, 0x10, 0x04, 0x01, 0x08, 0x0E, 0x1C),
    CastleRule(
        MoveKind.CASTLE_BK, Color.BLACK, CASTLE_BK, 0x10 << 56, 0x40 << 56, 0x80 << 56,
        0x20 << 56, 0x60 << 56, 0x70 << 56,
    ),
    CastleRule(
        MoveKind.CASTLE_BQ, Color.BLACK, CASTLE_BQ, 0x10 << 56, 0x04 << 56, 0x01 << 56,
        0x08 << 56, 0x0E << 56, 0x1C << 56,
    ),
)
CASTLE_RULE_BY_KIND = {rule.kind: rule for rule in CASTLE_RULES}

PROMOTIONS = {
    Color.WHITE: (WQ, WR, WB, WN),
    Color.BLACK: (BQ, BR, BB, BN),
}


@dataclass(frozen=True)
class _PawnGeometry:
    pawn: int
    push: Callable[[int], int]
    double_rank: int  # rank a double push lands on
    last_rank: int
    captures: Tuple[Tuple[Callable[[int], int], int], ...]
    ep_rank: int  # rank a pawn must stand on to capture en passant
    ep_east: Callable[[int], int]
    ep_west: Callable[[int], int]


_PAWNS = {
    Color.WHITE: _PawnGeometry(
        WP, north, RANK_4, RANK_8,
        ((north_east, NOT_A_FILE), (north_west, NOT_H_FILE)),
        RANK_5, north_east, north_west,
    ),
    Color.BLACK: _PawnGeometry(
        BP, south, RANK_5, RANK_1,
        ((south_east, NOT_A_FILE), (south_west, NOT_H_FILE)),
        RANK_4, south_east, south_west,
    ),
}


@dataclass(frozen=True)
class Position:
    """Immutable board state built from twelve occupancy bitboards.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``en_passant`` holds the square of the pawn that just double-pushed
      (not the square it skipped), or 0.
    - ``castling`` is a mask of the ``CASTLE_*`` flags.
    - The side to move is not part of the position; callers pass a colour.
    """

    pieces: Tuple[int, ...]
    en_passant: int = 0
    castling: int = 0

    @classmethod
    def startpos(cls) -> "Position":
        """Create the standard chess starting position."""
        return cls(pieces=START_PIECES, en_passant=0, castling=CASTLE_ALL)

    @classmethod
    def empty_board(cls) -> "Position":
        return cls(pieces=(0,) * PIECE_COUNT)

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Position: Position encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters.

        Notes:
            The side to move and the move counters are validated but not kept.
            The en-passant target square is converted to the square of the
            pawn that double-pushed.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        bb = [0] * PIECE_COUNT
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    bb[CHAR_TO_PIECE[ch]] |= 1 << (rank_idx * 8 + file_idx)
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        rights = 0
        if castling != "-":
            for ch in castling:
                flag = next((f for f, c in _CASTLING_CHARS if c == ch), None)
                if flag is None:
                    raise ValueError("invalid castling rights")
                rights |= flag

        en_passant = 0
        if ep != "-":
            try:
                target = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            rank = target // 8
            if rank == 2:
                en_passant = 1 << (target + 8)
            elif rank == 5:
                en_passant = 1 << (target - 8)
            else:
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(pieces=tuple(bb), en_passant=en_passant, castling=rights)

    def to_fen(self, side_to_move: Color = Color.WHITE, halfmove: int = 0, fullmove: int = 1) -> str:
        """Serialize the position into a FEN string.

        Args:
            side_to_move (Color): Colour written into the side-to-move field.
            halfmove (int): Halfmove clock to emit.
            fullmove (int): Fullmove number to emit.

        Returns:
            str: FEN string describing the position.
        """
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):
            run = 0
            row = []
            for file_idx in range(8):
                idx = self.piece_at(rank_idx * 8 + file_idx)
                if idx is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(PIECE_TO_CHAR[idx])
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)

        castling = "".join(c for f, c in _CASTLING_CHARS if self.castling & f) or "-"
        ep = "-"
        if self.en_passant:
            sq = lsb_index(self.en_passant)
            ep = square_to_str(sq - 8 if sq // 8 == 3 else sq + 8)
        return f"{placement} {side_to_move.value} {castling} {ep} {halfmove} {fullmove}"

    # --- Occupancy ---
    def white_pieces(self) -> int:
        p = self.pieces
        return p[WP] | p[WR] | p[WN] | p[WB] | p[WQ] | p[WK]

    def black_pieces(self) -> int:
        p = self.pieces
        return p[BP] | p[BR] | p[BN] | p[BB] | p[BQ] | p[BK]

    def pieces_of(self, color: Color) -> int:
        return self.white_pieces() if color is Color.WHITE else self.black_pieces()

    def occupied(self) -> int:
        return self.white_pieces() | self.black_pieces()

    def empty(self) -> int:
        return ~self.occupied() & MASK64

    def king_mask(self, color: Color) -> int:
        return self.pieces[WK if color is Color.WHITE else BK]

    def piece_at(self, sq: int) -> Optional[int]:
        """Return the occupancy index holding square ``sq``, or ``None`` when empty.

        Sets are tested in index order, so with disjoint sets at most one matches.
        """
        for idx, bb in enumerate(self.pieces):
            if (bb >> sq) & 1:
                return idx
        return None

    def remove_piece(self, mask: int) -> List[int]:
        """Return a copy of the occupancy sets with every bit in ``mask`` cleared."""
        keep = ~mask & MASK64
        return [bb & keep for bb in self.pieces]

    # --- Attacks ---
    def attacks(self, color: Color) -> int:
        """Return every square attacked by ``color`` against the full occupancy."""
        empty = self.empty()
        pawn, rook, knight, bishop, queen, king = pieces_for(color)
        p = self.pieces
        if color is Color.WHITE:
            attacks = white_pawn_attacks(p[pawn])
        else:
            attacks = black_pawn_attacks(p[pawn])
        attacks |= knight_attacks(p[knight]) | king_attacks(p[king])
        for cur in iter_bits(p[rook]):
            attacks |= rook_attacks(cur, empty)
        for cur in iter_bits(p[bishop]):
            attacks |= bishop_attacks(cur, empty)
        for cur in iter_bits(p[queen]):
            attacks |= queen_attacks(cur, empty)
        return attacks

    def is_attacked(self, by: Color, mask: int) -> bool:
        """Return True if any square in ``mask`` is attacked by colour ``by``."""
        return (self.attacks(by) & mask) != 0

    # --- Pseudo-legal move generation ---
    def generate_moves(self, color: Color) -> List[Move]:
        """Return pseudo-legal moves for ``color``.

        Moves obey piece movement rules but may leave the mover's own king in
        check; the controller filters those out.
        """
        empty = self.empty()
        enemy = self.pieces_of(color.other)
        pawn, rook, knight, bishop, queen, king = pieces_for(color)

        moves = self._pawn_moves(color, enemy, empty)
        moves.extend(self._piece_moves(rook, lambda b: rook_attacks(b, empty), enemy, empty))
        moves.extend(self._piece_moves(knight, knight_attacks, enemy, empty))
        moves.extend(self._piece_moves(bishop, lambda b: bishop_attacks(b, empty), enemy, empty))
        moves.extend(self._piece_moves(queen, lambda b: queen_attacks(b, empty), enemy, empty))
        moves.extend(self._piece_moves(king, king_attacks, enemy, empty))
        moves.extend(self._castle_moves(color, empty))
        return moves

    def _piece_moves(
        self, index: int, attack_fn: Callable[[int], int], enemy: int, empty: int
    ) -> List[Move]:
        moves: List[Move] = []
        for cur in iter_bits(self.pieces[index]):
            targets = attack_fn(cur)
            for to in iter_bits(targets & empty):
                moves.append(Move(MoveKind.SLIDE, index, cur, to))
            for to in iter_bits(targets & enemy):
                moves.append(Move(MoveKind.CAPTURE, index, cur, to))
        return moves

    def _pawn_moves(self, color: Color, enemy: int, empty: int) -> List[Move]:
        geo = _PAWNS[color]
        promos = PROMOTIONS[color]
        moves: List[Move] = []

        def add(kind: MoveKind, cur: int, to: int) -> None:
            if to & geo.last_rank:
                for promo in promos:
                    moves.append(Move(kind, geo.pawn, cur, to, promo))
            else:
                moves.append(Move(kind, geo.pawn, cur, to))

        for cur in iter_bits(self.pieces[geo.pawn]):
            single = geo.push(cur) & empty
            if single:
                add(MoveKind.SINGLE_PUSH, cur, single)
                double = geo.push(single) & empty & geo.double_rank
                if double:
                    moves.append(Move(MoveKind.DOUBLE_PUSH, geo.pawn, cur, double))

            for shift, guard in geo.captures:
                target = shift(cur) & guard & enemy
                if target:
                    add(MoveKind.CAPTURE, cur, target)

            if self.en_passant and (cur & geo.ep_rank):
                if east(cur) & NOT_A_FILE & self.en_passant:
                    moves.append(Move(MoveKind.EN_PASSANT, geo.pawn, cur, geo.ep_east(cur)))
                if west(cur) & NOT_H_FILE & self.en_passant:
                    moves.append(Move(MoveKind.EN_PASSANT, geo.pawn, cur, geo.ep_west(cur)))
        return moves

    def _castle_moves(self, color: Color, empty: int) -> List[Move]:
        moves: List[Move] = []
        king = self.king_mask(color)
        rook_index = WR if color is Color.WHITE else BR
        for rule in CASTLE_RULES:
            if rule.color is not color or not (self.castling & rule.right):
                continue
            if king != rule.king_from or not (self.pieces[rook_index] & rule.rook_from):
                continue
            if (empty & rule.between) != rule.between:
                continue
            if self.is_attacked(color.other, rule.king_path):
                continue
            moves.append(Move(rule.kind, WK if color is Color.WHITE else BK, king, rule.king_to))
        return moves
