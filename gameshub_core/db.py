from __future__ import annotations

import json
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DB = os.getenv('GAMESHUB_DB', os.path.join('data', 'gameshub.db'))


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable DB path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        logger.warning("cannot create directory for %s; trying fallbacks", db_path)
    candidates = [
        os.getenv('GAMESHUB_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'gameshub.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    # Last resort: current working directory
    return base


def _ensure_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS sessions (
            key TEXT PRIMARY KEY,
            game TEXT NOT NULL,
            payload TEXT NOT NULL,
            saved_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def _connect(db_path: str) -> sqlite3.Connection:
    resolved = _resolve_db_path(db_path)
    conn = sqlite3.connect(resolved)
    _ensure_db(conn)
    return conn


def db_store_session(db_path: str, key: str, game: str, payload: Dict[str, Any]) -> None:
    """Stores (or replaces) a session payload under ``key``."""
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            INSERT OR REPLACE INTO sessions (key, game, payload, saved_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                key,
                game,
                json.dumps(payload, ensure_ascii=False, separators=(',', ':')),
                datetime.now(timezone.utc).isoformat(timespec='seconds'),
            ),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("stored %s session %s", game, key)


def db_load_session(db_path: str, key: str) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Looks up a stored session; returns (game, payload) or None."""
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT game, payload FROM sessions WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    if not row:
        return None
    game, payload = row
    return game, json.loads(payload)


def db_delete_session(db_path: str, key: str) -> bool:
    conn = _connect(db_path)
    try:
        cur = conn.execute("DELETE FROM sessions WHERE key = ?", (key,))
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()


def db_list_sessions(db_path: str, game: Optional[str] = None) -> List[Dict[str, str]]:
    conn = _connect(db_path)
    try:
        if game is None:
            cur = conn.execute("SELECT key, game, saved_at FROM sessions ORDER BY saved_at DESC, key")
        else:
            cur = conn.execute(
                "SELECT key, game, saved_at FROM sessions WHERE game = ? ORDER BY saved_at DESC, key",
                (game,),
            )
        return [{"key": k, "game": g, "savedAt": s} for k, g, s in cur.fetchall()]
    finally:
        conn.close()
