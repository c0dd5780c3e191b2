from __future__ import annotations

from fastapi.testclient import TestClient

from bitchess.config import EngineSettings
from bitchess.protocol.http.app import create_app

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app(EngineSettings(search_depth=2, search_workers=2)))


def _new_game(client: TestClient) -> str:
    r = client.post("/api/games")
    assert r.status_code == 200
    return r.json()["game_id"]


def test_create_game_returns_start_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == START_FEN
    assert state["side_to_move"] == "w"
    assert len(state["board"]) == 64
    assert state["board"][4] == "K" and state["board"][60] == "k"
    assert state["board"][27] is None
    assert len(state["legal_moves"]) == 20
    assert state["in_check"] is False
    assert state["can_undo"] is False
    assert state["move_history"] == []

    r_state = client.get(f"/api/games/{state['game_id']}/state")
    assert r_state.status_code == 200
    assert r_state.json() == state


def test_move_updates_board_and_turn() -> None:
    client = _client()
    gid = _new_game(client)
    r = client.post(f"/api/games/{gid}/move", json={"move": "e2e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    assert state["board"][12] is None
    assert state["board"][28] == "P"
    assert state["side_to_move"] == "b"
    assert state["move_history"] == ["e2e4"]
    assert state["can_undo"] is True

    r = client.post(f"/api/games/{gid}/move", json={"move": "e7e5"})
    assert r.json()["fen"].endswith(" w KQkq e6 0 2")


def test_illegal_and_malformed_moves_are_rejected() -> None:
    client = _client()
    gid = _new_game(client)

    r = client.post(f"/api/games/{gid}/move", json={"move": "e2e5"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "illegal move"

    # Black piece while it is White's turn
    r = client.post(f"/api/games/{gid}/move", json={"move": "e7e5"})
    assert r.status_code == 400

    r = client.post(f"/api/games/{gid}/move", json={"move": "zz"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"

    assert client.get(f"/api/games/{gid}/state").json()["move_history"] == []


def test_undo_and_reset() -> None:
    client = _client()
    gid = _new_game(client)

    # Undo with no history is a no-op
    r = client.post(f"/api/games/{gid}/undo")
    assert r.status_code == 200
    assert r.json()["fen"] == START_FEN

    client.post(f"/api/games/{gid}/move", json={"move": "g1f3"})
    client.post(f"/api/games/{gid}/move", json={"move": "g8f6"})
    r = client.post(f"/api/games/{gid}/undo")
    state = r.json()
    assert state["side_to_move"] == "b"
    assert state["move_history"] == ["g1f3"]

    r = client.post(f"/api/games/{gid}/reset")
    state = r.json()
    assert state["fen"] == START_FEN
    assert state["can_undo"] is False


def test_set_position_and_promote() -> None:
    client = _client()
    gid = _new_game(client)
    r = client.post(f"/api/games/{gid}/position", json={"fen": "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"})
    assert r.status_code == 200
    assert {"e7e8q", "e7e8r", "e7e8b", "e7e8n"}.issubset(r.json()["legal_moves"])

    # A bare push onto the last rank names no piece
    assert client.post(f"/api/games/{gid}/move", json={"move": "e7e8"}).status_code == 400

    r = client.post(f"/api/games/{gid}/move", json={"move": "e7e8n"})
    assert r.status_code == 200
    state = r.json()
    assert state["board"][60] == "N"
    assert state["board"][52] is None
    assert state["fen"] == "4N3/8/8/8/8/8/k7/4K3 b - - 0 1"


def test_set_position_rejects_bad_fen() -> None:
    client = _client()
    gid = _new_game(client)
    r = client.post(f"/api/games/{gid}/position", json={"fen": "not a fen"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "invalid FEN"


def test_position_reports_check() -> None:
    client = _client()
    gid = _new_game(client)
    r = client.post(f"/api/games/{gid}/position", json={"fen": "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"})
    state = r.json()
    assert state["in_check"] is True
    assert state["legal_moves"] == []


def test_engine_move() -> None:
    client = _client()
    gid = _new_game(client)
    legal = client.get(f"/api/games/{gid}/state").json()["legal_moves"]

    r = client.post(f"/api/games/{gid}/engine-move")
    assert r.status_code == 200
    body = r.json()
    assert body["move"] in legal
    assert body["state"]["side_to_move"] == "b"
    assert body["state"]["move_history"] == [body["move"]]

    r = client.post(f"/api/games/{gid}/engine-move", json={"parallel": True})
    assert r.status_code == 200
    assert r.json()["state"]["side_to_move"] == "w"


def test_engine_move_takes_material() -> None:
    client = _client()
    gid = _new_game(client)
    client.post(f"/api/games/{gid}/position", json={"fen": "4k3/8/2n5/8/3Q4/8/8/4K3 b - - 0 1"})
    r = client.post(f"/api/games/{gid}/engine-move", json={"parallel": True})
    assert r.json()["move"] == "c6d4"


def test_engine_move_without_legal_moves() -> None:
    client = _client()
    gid = _new_game(client)
    fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
    client.post(f"/api/games/{gid}/position", json={"fen": fen})
    r = client.post(f"/api/games/{gid}/engine-move")
    assert r.status_code == 200
    body = r.json()
    assert body["move"] is None
    assert body["state"]["fen"] == fen
    assert body["state"]["in_check"] is False


def test_delete_game_and_unknown_ids() -> None:
    client = _client()
    gid = _new_game(client)
    assert client.delete(f"/api/games/{gid}").status_code == 200

    r = client.get(f"/api/games/{gid}/state")
    assert r.status_code == 404
    body = r.json()
    assert body["error"]["code"] == "not_found"
    assert body["error"]["message"] == "game not found"
    assert client.delete(f"/api/games/{gid}").status_code == 404
    assert client.post("/api/games/nope/move", json={"move": "e2e4"}).status_code == 404
