from __future__ import annotations

from typing import Dict

from .board import Position
from .controller import apply_move, generate_legal_moves
from .types import Color


def perft(position: Position, color: Color, depth: int) -> int:
    """Compute perft node count for ``position`` with ``color`` to move.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Raises:
        ValueError: If ``depth`` is negative.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = generate_legal_moves(position, color)
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        nodes += perft(apply_move(m, position), color.other, depth - 1)
    return nodes


def divide(position: Position, color: Color, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) per root move, keyed by UCI text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    return {
        m.to_uci(): perft(apply_move(m, position), color.other, depth - 1)
        for m in generate_legal_moves(position, color)
    }
