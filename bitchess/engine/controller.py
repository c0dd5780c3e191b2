from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .board import CASTLE_RULE_BY_KIND, Position
from .move import CASTLE_KINDS, Move, MoveKind, parse_uci
from .types import (
    BK,
    BR,
    CASTLE_BK,
    CASTLE_BQ,
    CASTLE_WK,
    CASTLE_WQ,
    PIECE_TO_CHAR,
    WK,
    WR,
    Color,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..search.service import SearchService


logger = logging.getLogger(__name__)

# Rook home corners and the right each one guards
_ROOK_CORNERS = (
    (WR, 1 << 7, CASTLE_WK),
    (WR, 1 << 0, CASTLE_WQ),
    (BR, 1 << 63, CASTLE_BK),
    (BR, 1 << 56, CASTLE_BQ),
)
_KING_RIGHTS = {WK: CASTLE_WK | CASTLE_WQ, BK: CASTLE_BK | CASTLE_BQ}


def generate_legal_moves(position: Position, color: Color) -> List[Move]:
    """Return the legal moves for ``color`` in ``position``.

    Each pseudo-legal move is applied and kept only if the mover's king is not
    attacked afterwards, which rejects moving into check and moving pinned
    pieces.
    """
    enemy = color.other
    legal: List[Move] = []
    for mv in position.generate_moves(color):
        nxt = apply_move(mv, position)
        if not nxt.is_attacked(enemy, nxt.king_mask(color)):
            legal.append(mv)
    return legal


def apply_move(move: Move, position: Position) -> Position:
    """Return the position reached by playing ``move`` in ``position``.

    The move is trusted: it must come from the legal move list of
    ``position``. The en-passant mask is cleared unless the move is a double
    push.
    """
    bb = list(position.pieces)
    castling = position.castling
    en_passant = 0
    clear_from = ~move.from_mask
    kind = move.kind

    if kind == MoveKind.CAPTURE:
        captured = position.piece_at(move.to_sq)
        bb = position.remove_piece(move.to_mask)
        castling &= ~_rook_corner_rights(captured, move.to_mask)
    elif kind == MoveKind.EN_PASSANT:
        bb = position.remove_piece(position.en_passant)
    elif kind == MoveKind.DOUBLE_PUSH:
        en_passant = move.to_mask

    bb[move.piece] &= clear_from
    if move.promotion is not None:
        bb[move.promotion] |= move.to_mask
    else:
        bb[move.piece] |= move.to_mask

    if kind in CASTLE_KINDS:
        rule = CASTLE_RULE_BY_KIND[kind]
        rook = WR if rule.color is Color.WHITE else BR
        bb[rook] = (bb[rook] & ~rule.rook_from) | rule.rook_to

    # King moves and rooks leaving their corner give up castling
    castling &= ~_KING_RIGHTS.get(move.piece, 0)
    castling &= ~_rook_corner_rights(move.piece, move.from_mask)
    return Position(pieces=tuple(bb), en_passant=en_passant, castling=castling)


def _rook_corner_rights(piece: Optional[int], mask: int) -> int:
    for rook, corner, right in _ROOK_CORNERS:
        if piece == rook and mask == corner:
            return right
    return 0


class BoardController:
    """Owns the current position and its undo history.

    Responsibility: expose legal moves, commit caller- or engine-chosen moves,
    and revert them. Not safe for concurrent use.
    """

    def __init__(self, search: Optional["SearchService"] = None) -> None:
        self._position = Position.startpos()
        self._history: List[Position] = []
        self._search = search

    @property
    def position(self) -> Position:
        return self._position

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def ply(self) -> int:
        return len(self._history)

    def reset(self) -> None:
        """Restore the starting position and clear the undo history."""
        self._position = Position.startpos()
        self._history.clear()

    def set_position(self, position: Position) -> None:
        """Replace the current position and clear the undo history."""
        self._position = position
        self._history.clear()

    def legal_moves(self, color: Color) -> List[Move]:
        return generate_legal_moves(self._position, color)

    def make_move(self, move: Move) -> None:
        """Commit ``move``, which must be legal in the current position."""
        self._history.append(self._position)
        self._position = apply_move(move, self._position)

    def make_engine_move(self, color: Color, *, parallel: bool = False) -> Optional[Move]:
        """Let the search pick and commit a move for ``color``.

        Returns:
            Optional[Move]: The committed move, or ``None`` when ``color`` has
                no legal move (nothing is committed in that case).
        """
        search = self._search
        if search is None:
            from ..search.service import SearchService

            search = self._search = SearchService()
        if parallel:
            move = search.determine_move_parallel(self._position, color)
        else:
            move = search.determine_move(self._position, color)
        if move is None:
            logger.debug("no legal move for %s", color.name)
            return None
        logger.debug("engine plays %s for %s", move.to_uci(), color.name)
        self.make_move(move)
        return move

    def undo_move(self) -> bool:
        """Revert the last committed move; a no-op on empty history.

        Returns:
            bool: True if a position was restored.
        """
        if not self._history:
            return False
        self._position = self._history.pop()
        return True

    def in_check(self, color: Color) -> bool:
        return self._position.is_attacked(color.other, self._position.king_mask(color))

    def find_move(self, color: Color, uci: str) -> Optional[Move]:
        """Resolve UCI text against the legal moves of ``color``.

        Raises:
            ValueError: If ``uci`` is not well-formed.
        """
        from_sq, to_sq, promo = parse_uci(uci)
        for mv in self.legal_moves(color):
            if mv.from_sq != from_sq or mv.to_sq != to_sq:
                continue
            mv_promo = PIECE_TO_CHAR[mv.promotion].lower() if mv.promotion is not None else None
            if mv_promo == promo:
                return mv
        return None
