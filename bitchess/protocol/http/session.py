from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.board import Position
from ...engine.controller import BoardController
from ...engine.move import Move
from ...engine.types import Color
from ...search.service import SearchService


@dataclass
class GameSession:
    """One game: a controller plus the turn bookkeeping the core leaves to callers."""

    controller: BoardController
    side_to_move: Color = Color.WHITE
    moves: List[Move] = field(default_factory=list)
    start_side: Color = Color.WHITE
    start_fullmove: int = 1

    @classmethod
    def new(cls, search: Optional[SearchService] = None) -> "GameSession":
        return cls(controller=BoardController(search=search))

    def play(self, move: Move) -> None:
        self.controller.make_move(move)
        self.moves.append(move)
        self.side_to_move = self.side_to_move.other

    def play_engine(self, *, parallel: bool = False) -> Optional[Move]:
        move = self.controller.make_engine_move(self.side_to_move, parallel=parallel)
        if move is not None:
            self.moves.append(move)
            self.side_to_move = self.side_to_move.other
        return move

    def undo(self) -> bool:
        if not self.controller.undo_move():
            return False
        self.moves.pop()
        self.side_to_move = self.side_to_move.other
        return True

    def reset(self) -> None:
        self.controller.reset()
        self.moves.clear()
        self.side_to_move = self.start_side = Color.WHITE
        self.start_fullmove = 1

    def load_fen(self, fen: str) -> None:
        """Replace the game with the position in ``fen``.

        Raises:
            ValueError: If ``fen`` is invalid.
        """
        position = Position.from_fen(fen)
        fields = fen.split()
        self.controller.set_position(position)
        self.moves.clear()
        self.side_to_move = self.start_side = Color(fields[1])
        self.start_fullmove = int(fields[5])

    @property
    def fullmove_number(self) -> int:
        offset = 1 if self.start_side is Color.BLACK else 0
        return self.start_fullmove + (len(self.moves) + offset) // 2

    def to_fen(self) -> str:
        return self.controller.position.to_fen(
            self.side_to_move, halfmove=0, fullmove=self.fullmove_number
        )


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Delete sessions

    Only the mapping is locked; a session itself is not safe for concurrent use.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, GameSession] = {}

    def create(self, session: GameSession) -> str:
        """Register ``session`` and return its new `game_id`."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._games[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._games.get(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
