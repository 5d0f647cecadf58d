from __future__ import annotations

import os
from typing import Any, Dict

from flask import Flask, jsonify, request

from gameshub_core.codec import (
    SESSION_CODECS,
    constraint_grid_from_json,
    grid_to_json,
    json_to_memory_session,
    json_to_merge_session,
    json_to_sudoku_session,
    memory_session_to_json,
    merge_session_to_json,
    sudoku_session_to_json,
)
from gameshub_core.logging_config import get_logger, setup_logging
from game import (
    DEFAULT_DB,
    Difficulty,
    GameRuleError,
    InvalidGridError,
    MemorySession,
    MergeSession,
    SudokuSession,
    UnsolvableGridError,
    db_delete_session,
    db_load_session,
    db_store_session,
    make_random,
    solve,
)

logger = get_logger(__name__)

app = Flask(__name__)
app.config["GAMESHUB_DB"] = DEFAULT_DB


# ---------- Error mapping ----------

@app.errorhandler(InvalidGridError)
def _bad_input(e: InvalidGridError) -> Any:
    logger.warning("rejected input on %s: %s", request.path, e)
    return jsonify({"ok": False, "error": str(e)}), 400


@app.errorhandler(GameRuleError)
def _illegal_action(e: GameRuleError) -> Any:
    return jsonify({"ok": False, "error": str(e)}), 409


@app.errorhandler(UnsolvableGridError)
def _unsolvable(e: UnsolvableGridError) -> Any:
    logger.warning("unsolvable grid on %s", request.path)
    return jsonify({"ok": False, "error": str(e)}), 422


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise InvalidGridError("request body must be a JSON object")
    return body


def _rng(body: Dict[str, Any]):
    seed = body.get("seed", None)
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise InvalidGridError("seed must be an integer")
    return make_random(seed)


def _int(body: Dict[str, Any], key: str) -> int:
    value = body.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidGridError(f"{key} must be an integer")
    return value


def _bool(body: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = body.get(key, default)
    if not isinstance(value, bool):
        raise InvalidGridError(f"{key} must be true or false")
    return value


def _decode(decoder, obj: Any):
    try:
        return decoder(obj)
    except InvalidGridError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InvalidGridError(f"bad state: {e}") from e


@app.get("/api/health")
def health() -> Any:
    return jsonify({"ok": True, "games": sorted(SESSION_CODECS)})


# ---------- 2048 ----------

@app.post("/api/merge/new")
def merge_new() -> Any:
    body = _body()
    best = body.get("bestScore", 0)
    if not isinstance(best, int) or isinstance(best, bool) or best < 0:
        raise InvalidGridError("bestScore must be a non-negative integer")
    session = MergeSession.start(_rng(body), best_score=best)
    logger.info("new merge game")
    return jsonify({"ok": True, "state": merge_session_to_json(session)})


@app.post("/api/merge/move")
def merge_move() -> Any:
    body = _body()
    session = _decode(json_to_merge_session, body.get("state"))
    if "direction" not in body:
        raise InvalidGridError("direction required")
    next_session, result = session.play(body["direction"], _rng(body))
    return jsonify({
        "ok": True,
        "changed": result.changed,
        "pointsGained": result.points_gained,
        "state": merge_session_to_json(next_session),
    })


@app.post("/api/merge/undo")
def merge_undo() -> Any:
    body = _body()
    session = _decode(json_to_merge_session, body.get("state"))
    return jsonify({"ok": True, "state": merge_session_to_json(session.undo())})


# ---------- Sudoku ----------

@app.post("/api/sudoku/new")
def sudoku_new() -> Any:
    body = _body()
    difficulty = Difficulty.parse(body.get("difficulty", Difficulty.MEDIUM))
    session = SudokuSession.start(difficulty, _rng(body), require_unique=_bool(body, "unique"))
    return jsonify({"ok": True, "state": sudoku_session_to_json(session)})


def _sudoku_session(body: Dict[str, Any]) -> SudokuSession:
    session = _decode(json_to_sudoku_session, body.get("state"))
    if "elapsed" in body:
        session = session.with_elapsed(_int(body, "elapsed"))
    return session


@app.post("/api/sudoku/place")
def sudoku_place() -> Any:
    body = _body()
    session = _sudoku_session(body)
    next_session = session.place(_int(body, "row"), _int(body, "col"), _int(body, "value"))
    correct = next_session.mistakes == session.mistakes
    return jsonify({"ok": True, "correct": correct, "state": sudoku_session_to_json(next_session)})


@app.post("/api/sudoku/clear")
def sudoku_clear() -> Any:
    body = _body()
    session = _sudoku_session(body).clear(_int(body, "row"), _int(body, "col"))
    return jsonify({"ok": True, "state": sudoku_session_to_json(session)})


@app.post("/api/sudoku/note")
def sudoku_note() -> Any:
    body = _body()
    session = _sudoku_session(body).toggle_note(_int(body, "row"), _int(body, "col"), _int(body, "value"))
    return jsonify({"ok": True, "state": sudoku_session_to_json(session)})


@app.post("/api/sudoku/hint")
def sudoku_hint() -> Any:
    body = _body()
    session, cell = _sudoku_session(body).hint()
    return jsonify({
        "ok": True,
        "cell": None if cell is None else [cell[0], cell[1]],
        "state": sudoku_session_to_json(session),
    })


@app.post("/api/sudoku/validate")
def sudoku_validate() -> Any:
    session = _sudoku_session(_body())
    return jsonify({
        "ok": True,
        "valid": session.is_valid,
        "complete": session.is_solved,
        "wrongCells": [[r, c] for (r, c) in session.wrong_cells()],
    })


@app.post("/api/sudoku/solve")
def sudoku_solve() -> Any:
    session = _sudoku_session(_body()).solve_now()
    return jsonify({"ok": True, "state": sudoku_session_to_json(session)})


@app.post("/api/sudoku/solve_grid")
def sudoku_solve_grid() -> Any:
    body = _body()
    grid = constraint_grid_from_json(body.get("grid"))
    solved = solve(grid)
    if solved is None:
        raise UnsolvableGridError("grid has no solution")
    return jsonify({"ok": True, "grid": grid_to_json(solved)})


# ---------- Memory ----------

@app.post("/api/memory/new")
def memory_new() -> Any:
    body = _body()
    pairs = body.get("pairs", 8)
    if not isinstance(pairs, int) or isinstance(pairs, bool):
        raise InvalidGridError("pairs must be an integer")
    session = MemorySession.start(_rng(body), pairs)
    return jsonify({"ok": True, "state": memory_session_to_json(session)})


def _memory_session(body: Dict[str, Any]) -> MemorySession:
    session = _decode(json_to_memory_session, body.get("state"))
    if "elapsed" in body:
        session = session.with_elapsed(_int(body, "elapsed"))
    return session


@app.post("/api/memory/flip")
def memory_flip() -> Any:
    body = _body()
    session = _memory_session(body).flip(_int(body, "index"))
    return jsonify({"ok": True, "state": memory_session_to_json(session)})


@app.post("/api/memory/resolve")
def memory_resolve() -> Any:
    session, matched = _memory_session(_body()).resolve()
    return jsonify({"ok": True, "matched": matched, "state": memory_session_to_json(session)})


@app.post("/api/memory/reveal")
def memory_reveal() -> Any:
    # The client posts to /api/memory/hide after its own delay
    session = _memory_session(_body()).reveal()
    return jsonify({"ok": True, "state": memory_session_to_json(session)})


@app.post("/api/memory/hide")
def memory_hide() -> Any:
    session = _memory_session(_body()).hide()
    return jsonify({"ok": True, "state": memory_session_to_json(session)})


# ---------- Saved sessions ----------

def _db_path() -> str:
    return app.config["GAMESHUB_DB"]


@app.post("/api/session/save")
def session_save() -> Any:
    body = _body()
    key = body.get("key")
    game = body.get("game")
    if not isinstance(key, str) or not key.strip():
        raise InvalidGridError("key required")
    if game not in SESSION_CODECS:
        raise InvalidGridError(f"unknown game: {game!r}")
    encode, decode = SESSION_CODECS[game]
    # Round-trip through the decoder so only well-formed sessions reach the store
    payload = encode(_decode(decode, body.get("state")))
    db_store_session(_db_path(), key.strip(), game, payload)
    return jsonify({"ok": True, "key": key.strip()})


@app.get("/api/session/<key>")
def session_load(key: str) -> Any:
    found = db_load_session(_db_path(), key)
    if found is None:
        return jsonify({"ok": False, "error": "session not found"}), 404
    game, payload = found
    return jsonify({"ok": True, "game": game, "state": payload})


@app.delete("/api/session/<key>")
def session_delete(key: str) -> Any:
    if not db_delete_session(_db_path(), key):
        return jsonify({"ok": False, "error": "session not found"}), 404
    return jsonify({"ok": True})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    setup_logging()
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=debug)
