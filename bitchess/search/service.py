from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bitchess.config import EngineSettings
from bitchess.engine.board import Position
from bitchess.engine.controller import apply_move, generate_legal_moves
from bitchess.engine.move import Move
from bitchess.engine.types import Color
from bitchess.eval import evaluate


logger = logging.getLogger(__name__)

INF = 10_000_000


@dataclass
class ScoredMove:
    move: Optional[Move]
    score: int


class _SharedBest:
    """Best root result shared by the parallel workers, guarded by a lock."""

    def __init__(self, maximizing: bool) -> None:
        self._lock = threading.Lock()
        self._maximizing = maximizing
        self.score = -INF if maximizing else INF
        self.index = -1
        self.move: Optional[Move] = None

    def offer(self, index: int, move: Move, score: int) -> None:
        with self._lock:
            if self._maximizing:
                better = score > self.score
            else:
                better = score < self.score
            # Equal scores keep the earliest root move, as the sequential search does
            if self.move is None or better or (score == self.score and index < self.index):
                self.score = score
                self.index = index
                self.move = move


class SearchService:
    """Fixed-depth alpha-beta move selection.

    Black is the maximizing side and White the minimizing side; leaves are
    scored by the material evaluator. The service holds configuration only,
    so one instance may serve several positions.
    """

    def __init__(
        self,
        depth: Optional[int] = None,
        workers: Optional[int] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        settings = settings or EngineSettings()
        self.depth = depth if depth is not None else settings.search_depth
        self.workers = workers if workers is not None else settings.search_workers
        if self.depth < 1:
            raise ValueError("depth must be >= 1")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")

    def alpha_beta(
        self, position: Position, depth_left: int, alpha: int, beta: int, maximizing: bool
    ) -> ScoredMove:
        """Score ``position`` with alpha-beta pruning.

        Args:
            position (Position): Node to search.
            depth_left (int): Remaining plies; 0 returns the static evaluation.
            alpha (int): Lower bound the maximizing side is assured of.
            beta (int): Upper bound the minimizing side is assured of.
            maximizing (bool): True when Black is to move at this node.

        Returns:
            ScoredMove: Best score and the move producing it. A node without
                legal moves returns ``-INF`` (maximizing) or ``INF``
                (minimizing) and no move.
        """
        if depth_left == 0:
            return ScoredMove(None, evaluate(position))

        color = Color.BLACK if maximizing else Color.WHITE
        best = ScoredMove(None, -INF if maximizing else INF)
        for m in generate_legal_moves(position, color):
            child = apply_move(m, position)
            cur = self.alpha_beta(child, depth_left - 1, alpha, beta, not maximizing)
            # The first move is always recorded so a losing root still returns a move
            if maximizing:
                if best.move is None or cur.score > best.score:
                    best.score = cur.score
                    best.move = m
                alpha = max(alpha, best.score)
            else:
                if best.move is None or cur.score < best.score:
                    best.score = cur.score
                    best.move = m
                beta = min(beta, best.score)
            if beta <= alpha:
                break
        return best

    def minimax(self, position: Position, depth_left: int, maximizing: bool) -> ScoredMove:
        """Unpruned reference search; returns what ``alpha_beta`` returns at full window."""
        if depth_left == 0:
            return ScoredMove(None, evaluate(position))

        color = Color.BLACK if maximizing else Color.WHITE
        best = ScoredMove(None, -INF if maximizing else INF)
        for m in generate_legal_moves(position, color):
            cur = self.minimax(apply_move(m, position), depth_left - 1, not maximizing)
            if (
                best.move is None
                or (maximizing and cur.score > best.score)
                or (not maximizing and cur.score < best.score)
            ):
                best.score = cur.score
                best.move = m
        return best

    def search(self, position: Position, color: Color) -> ScoredMove:
        """Run the root search for ``color`` and return its move and score."""
        start = time.perf_counter()
        res = self.alpha_beta(position, self.depth, -INF, INF, color is Color.BLACK)
        logger.debug(
            "search color=%s depth=%d move=%s score=%d time_ms=%d",
            color.name,
            self.depth,
            res.move.to_uci() if res.move else None,
            res.score,
            int((time.perf_counter() - start) * 1000),
        )
        return res

    def determine_move(self, position: Position, color: Color) -> Optional[Move]:
        """Return the best move for ``color``, or ``None`` if it has no legal move.

        Ties keep the first move found in generation order.
        """
        return self.search(position, color).move

    def determine_move_parallel(self, position: Position, color: Color) -> Optional[Move]:
        """Root-parallel variant of ``determine_move``.

        Root moves are dealt round-robin to ``workers`` threads. Each thread
        copies the position once, scores its moves sequentially and offers
        each result to a lock-guarded shared best. The call blocks until all
        threads have finished and returns the same move as ``determine_move``.
        """
        moves = generate_legal_moves(position, color)
        if not moves:
            return None

        root_max = color is Color.BLACK
        buckets: List[List[Tuple[int, Move]]] = [[] for _ in range(self.workers)]
        for i, m in enumerate(moves):
            buckets[i % self.workers].append((i, m))

        best = _SharedBest(root_max)
        errors: List[BaseException] = []
        threads = [
            threading.Thread(
                target=self._score_bucket,
                args=(position, bucket, root_max, best, errors),
                name=f"bitchess-search-{n}",
            )
            for n, bucket in enumerate(buckets)
            if bucket
        ]
        start = time.perf_counter()
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        if errors:
            raise errors[0]

        logger.debug(
            "parallel search color=%s depth=%d threads=%d move=%s score=%d time_ms=%d",
            color.name,
            self.depth,
            len(threads),
            best.move.to_uci() if best.move else None,
            best.score,
            int((time.perf_counter() - start) * 1000),
        )
        return best.move

    def _score_bucket(
        self,
        position: Position,
        bucket: List[Tuple[int, Move]],
        root_max: bool,
        best: _SharedBest,
        errors: List[BaseException],
    ) -> None:
        try:
            board = copy.deepcopy(position)
            for index, m in bucket:
                cur = self.alpha_beta(
                    apply_move(m, board), self.depth - 1, -INF, INF, not root_max
                )
                best.offer(index, m, cur.score)
        except Exception as e:  # re-raised by the joining thread
            logger.exception("search worker failed")
            errors.append(e)
