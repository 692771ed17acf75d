from __future__ import annotations

import json
import logging
import os
import sqlite3
from typing import List, Optional

from .board import DEFAULT_START_YEAR, Board, new_board
from .codec import board_from_json, board_to_json
from .engine import check_cells

logger = logging.getLogger(__name__)

ACTIVE_ID_KEY = 'active_board_id'


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
        logger.warning("DB directory for %s is not writable, looking for a fallback", db_path)
    candidates = [
        os.getenv('LIFEBINGO_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'lifebingo.db'
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
    """Ensures the boards and settings tables exist."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS boards (
            id TEXT PRIMARY KEY,
            year INTEGER NOT NULL,
            month INTEGER,
            payload TEXT NOT NULL,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT
        )
        """
    )
    conn.commit()


class BoardStore:
    """SQLite-backed board collection plus the active-board selector.

    Each call opens its own connection, so a store can be shared freely
    between Flask requests.
    """

    def __init__(self, db_path: str):
        self.db_path = _resolve_db_path(db_path)

    def _connect(self) -> sqlite3.Connection:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        _ensure_db(conn)
        return conn

    @staticmethod
    def _decode(board_id: str, payload: str) -> Board:
        board = board_from_json(json.loads(payload))
        for problem in check_cells(board.items):
            logger.warning("board %s: %s", board_id, problem)
        return board

    def load_boards(self) -> List[Board]:
        """All boards in creation order."""
        conn = self._connect()
        try:
            rows = conn.execute("SELECT id, payload FROM boards ORDER BY created_at, rowid").fetchall()
        finally:
            conn.close()
        boards = [self._decode(bid, payload) for bid, payload in rows]
        logger.debug("loaded %d boards from %s", len(boards), self.db_path)
        return boards

    def load_board(self, board_id: str) -> Optional[Board]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT payload FROM boards WHERE id = ?", (board_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            return None
        return self._decode(board_id, row[0])

    def save_board(self, board: Board) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO boards (id, year, month, payload, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    board.id,
                    board.profile.year,
                    board.profile.month,
                    json.dumps(board_to_json(board), ensure_ascii=False),
                    board.created_at,
                    board.updated_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("saved board %s", board.id)

    def delete_board(self, board_id: str) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM boards WHERE id = ?", (board_id,))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def get_active_id(self) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (ACTIVE_ID_KEY,)).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def set_active_id(self, board_id: str) -> None:
        conn = self._connect()
        try:
            conn.execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (ACTIVE_ID_KEY, board_id))
            conn.commit()
        finally:
            conn.close()

    def load_or_create_boards(self) -> List[Board]:
        """Loads all boards, seeding a first board when the store is empty."""
        boards = self.load_boards()
        if boards:
            return boards
        first = new_board(DEFAULT_START_YEAR)
        self.save_board(first)
        self.set_active_id(first.id)
        logger.info("created first board %s for %d", first.id, DEFAULT_START_YEAR)
        return [first]
