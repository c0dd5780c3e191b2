"""Cross-check move generation against python-chess on tricky positions."""

from __future__ import annotations

import chess
import pytest

from bitchess.engine.board import Position
from bitchess.engine.controller import apply_move, generate_legal_moves
from bitchess.engine.types import Color

FENS = [
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1",
    "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
    "rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3",
    "8/8/8/K2Pp2r/8/8/8/7k w - e6 0 1",
    "r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1",
]


def _ours(p: Position, color: Color) -> set[str]:
    return {m.to_uci() for m in generate_legal_moves(p, color)}


def _reference(board: chess.Board) -> set[str]:
    return {m.uci() for m in board.legal_moves}


@pytest.mark.parametrize("fen", FENS)
def test_legal_moves_match_reference(fen: str) -> None:
    p = Position.from_fen(fen)
    color = Color(fen.split()[1])
    assert _ours(p, color) == _reference(chess.Board(fen))


@pytest.mark.parametrize("fen", FENS[:5])
def test_children_match_reference(fen: str) -> None:
    p = Position.from_fen(fen)
    color = Color(fen.split()[1])
    board = chess.Board(fen)
    for mv in generate_legal_moves(p, color):
        child = apply_move(mv, p)
        board.push_uci(mv.to_uci())
        assert _ours(child, color.other) == _reference(board), mv.to_uci()
        assert child.to_fen(color.other).split()[:3] == board.fen().split()[:3]
        board.pop()


@pytest.mark.parametrize("fen", FENS)
def test_no_legal_move_leaves_own_king_attacked(fen: str) -> None:
    p = Position.from_fen(fen)
    color = Color(fen.split()[1])
    for mv in generate_legal_moves(p, color):
        child = apply_move(mv, p)
        assert not child.is_attacked(color.other, child.king_mask(color))
