"""SQLite connection management for the delivery history."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict

# Applied in order; PRAGMA user_version records how many have run.
MIGRATIONS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS articles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT UNIQUE NOT NULL,
        link TEXT,
        inserted_at TEXT NOT NULL
    )
    """,
    # retention trim and history listing both order by insertion time
    "CREATE INDEX IF NOT EXISTS idx_articles_recency ON articles(inserted_at, id)",
)

SCHEMA_VERSION = len(MIGRATIONS)


class SQLiteManager:
    """Share one connection per history file and keep its schema current."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            conn = self._connections.get(path)
            if conn is None:
                conn = sqlite3.connect(path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                try:
                    self._migrate(conn)
                except sqlite3.Error:
                    conn.close()
                    raise
                self._connections[path] = conn
            return conn

    @staticmethod
    def schema_version(conn: sqlite3.Connection) -> int:
        return conn.execute("PRAGMA user_version").fetchone()[0]

    def _migrate(self, conn: sqlite3.Connection) -> None:
        current = self.schema_version(conn)
        if current > SCHEMA_VERSION:
            raise sqlite3.DatabaseError(
                f"history schema version {current} is newer than supported {SCHEMA_VERSION}"
            )
        for version, statement in enumerate(MIGRATIONS[current:], start=current + 1):
            with conn:
                conn.execute(statement)
                # PRAGMA does not accept bound parameters
                conn.execute(f"PRAGMA user_version = {version:d}")

    def reset(self, path: Path) -> None:
        with self._lock:
            conn = self._connections.pop(path, None)
            if conn is not None:
                conn.close()
        if path.exists():
            path.unlink()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


__all__ = ["MIGRATIONS", "SCHEMA_VERSION", "SQLiteManager"]
