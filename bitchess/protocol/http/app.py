from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...config import EngineSettings
from ...engine.board import Position
from ...engine.perft import perft as perft_nodes
from ...engine.types import PIECE_TO_CHAR, Color
from ...search.service import SearchService


logger = logging.getLogger(__name__)


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4 or e7e8q")


class EngineMoveRequest(BaseModel):
    parallel: bool = Field(default=False, description="Use the root-parallel search")


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=6)


class GameState(BaseModel):
    game_id: str
    side_to_move: str
    fen: str
    board: List[Optional[str]]
    legal_moves: List[str]
    in_check: bool
    can_undo: bool
    move_history: List[str]


class EngineMoveResponse(BaseModel):
    move: Optional[str]
    state: GameState


def create_app(settings: Optional[EngineSettings] = None) -> FastAPI:
    settings = settings or EngineSettings.from_env()
    app = FastAPI(title="bitchess API", version="0.1.0")

    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    search = SearchService(settings=settings)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=GameState)
    async def create_game() -> GameState:
        game_id = store.create(GameSession.new(search=search))
        logger.info("created game %s", game_id)
        return _state(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    async def reset(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        game.reset()
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        game = _require_game(store, game_id)
        try:
            game.load_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        try:
            move = game.controller.find_move(game.side_to_move, req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if move is None:
            raise HTTPException(status_code=400, detail="illegal move")
        game.play(move)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/engine-move", response_model=EngineMoveResponse)
    async def engine_move(
        game_id: str, req: Optional[EngineMoveRequest] = None
    ) -> EngineMoveResponse:
        game = _require_game(store, game_id)
        move = game.play_engine(parallel=req.parallel if req is not None else False)
        return EngineMoveResponse(
            move=move.to_uci() if move is not None else None,
            state=_state(game_id, game),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        game.undo()
        return _state(game_id, game)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            position = Position.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        color = Color(req.fen.split()[1])
        return {"nodes": perft_nodes(position, color, req.depth)}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> GameSession:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state(game_id: str, game: GameSession) -> GameState:
    controller = game.controller
    position = controller.position
    board: List[Optional[str]] = []
    for sq in range(64):
        idx = position.piece_at(sq)
        board.append(PIECE_TO_CHAR[idx] if idx is not None else None)
    return GameState(
        game_id=game_id,
        side_to_move=game.side_to_move.value,
        fen=game.to_fen(),
        board=board,
        legal_moves=[m.to_uci() for m in controller.legal_moves(game.side_to_move)],
        in_check=controller.in_check(game.side_to_move),
        can_undo=controller.can_undo,
        move_history=[m.to_uci() for m in game.moves],
    )
