from __future__ import annotations

from collections import Counter

from bitchess.engine.board import Position
from bitchess.engine.controller import apply_move, generate_legal_moves
from bitchess.engine.move import MoveKind
from bitchess.engine.types import BN, BP, BQ, WB, WN, WP, WQ, WR, Color


def _uci_set(moves):
    return set(m.to_uci() for m in moves)


def test_white_pawn_push_promotions() -> None:
    p = Position.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    ms = [m for m in generate_legal_moves(p, Color.WHITE) if m.piece == WP]
    assert _uci_set(ms) == {"e7e8q", "e7e8r", "e7e8b", "e7e8n"}
    assert len(ms) == 4
    assert {m.promotion for m in ms} == {WQ, WR, WB, WN}
    assert all(m.kind == MoveKind.SINGLE_PUSH for m in ms)


def test_white_pawn_capture_promotion_is_four_moves_per_target() -> None:
    # e7 pawn can push to e8 or capture on d8 or f8
    p = Position.from_fen("3r1rk1/4P3/8/8/8/8/8/4K3 w - - 0 1")
    ms = [m for m in generate_legal_moves(p, Color.WHITE) if m.piece == WP]
    per_target = Counter(m.to_uci()[2:4] for m in ms)
    assert per_target == {"e8": 4, "d8": 4, "f8": 4}
    assert all(m.promotion is not None for m in ms)
    assert {m.kind for m in ms if m.to_uci()[2:4] != "e8"} == {MoveKind.CAPTURE}


def test_black_pawn_push_promotions() -> None:
    p = Position.from_fen("4k3/8/8/8/8/8/3p4/7K b - - 0 1")
    ms = [m for m in generate_legal_moves(p, Color.BLACK) if m.piece == BP]
    assert _uci_set(ms) == {"d2d1q", "d2d1r", "d2d1b", "d2d1n"}


def test_promotion_replaces_pawn_with_chosen_piece() -> None:
    p = Position.from_fen("4k3/8/8/8/8/8/3p4/2R4K b - - 0 1")
    mv = next(
        m for m in generate_legal_moves(p, Color.BLACK) if m.to_uci() == "d2c1n"
    )
    nxt = apply_move(mv, p)
    c1 = 1 << 2
    assert nxt.pieces[BN] & c1
    assert not nxt.pieces[BP]
    assert not nxt.pieces[WR]  # captured
    assert not nxt.pieces[BQ]
