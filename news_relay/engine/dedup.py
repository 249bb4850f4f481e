"""Deduplication layer backed by the SQLite article history.

Identity is the item title. Records are only ever inserted (after delivery was
attempted) and removed by the retention trim.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Callable

from ..errors import DedupStoreError
from ..infra.storage import SQLiteManager
from .item import Item


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DedupRecord:
    title: str
    link: str | None
    inserted_at: str


class DedupStore:
    """Persistent set of delivered titles with bounded retention."""

    def __init__(
        self,
        manager: SQLiteManager,
        db_path: Path,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.manager = manager
        self.db_path = db_path
        self._now = now
        self._lock = Lock()
        try:
            self._conn = self.manager.connect(db_path)
        except sqlite3.Error as exc:
            raise DedupStoreError(
                f"Unable to open dedup store: {db_path}", {"error": str(exc)}
            ) from exc

    def exists(self, title: str) -> bool:
        with self._lock:
            try:
                cur = self._conn.execute("SELECT 1 FROM articles WHERE title = ?", (title,))
                return cur.fetchone() is not None
            except sqlite3.Error as exc:
                raise DedupStoreError("exists() failed", {"title": title, "error": str(exc)}) from exc

    def commit(self, item: Item) -> bool:
        """Record ``item`` as delivered. Returns False when the title was already known."""

        if not item.is_valid():
            raise ValueError("Cannot commit an item without a title")
        inserted_at = self._now().astimezone(timezone.utc).isoformat(timespec="microseconds")
        with self._lock:
            try:
                cur = self._conn.execute(
                    "INSERT OR IGNORE INTO articles(title, link, inserted_at) VALUES (?, ?, ?)",
                    (item.title, item.link, inserted_at),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                self._rollback()
                raise DedupStoreError(
                    "commit() failed", {"title": item.title, "error": str(exc)}
                ) from exc
        return cur.rowcount > 0

    def trim(self, max_count: int) -> int:
        """Keep only the ``max_count`` most recently inserted records."""

        if max_count < 0:
            raise ValueError("max_count must be >= 0")
        with self._lock:
            try:
                cur = self._conn.execute(
                    """
                    DELETE FROM articles
                    WHERE id NOT IN (
                        SELECT id FROM articles
                        ORDER BY inserted_at DESC, id DESC
                        LIMIT ?
                    )
                    """,
                    (max_count,),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                self._rollback()
                raise DedupStoreError(
                    "trim() failed", {"max_count": max_count, "error": str(exc)}
                ) from exc
        return cur.rowcount

    def count(self) -> int:
        with self._lock:
            try:
                return self._conn.execute("SELECT count(*) FROM articles").fetchone()[0]
            except sqlite3.Error as exc:
                raise DedupStoreError("count() failed", {"error": str(exc)}) from exc

    def recent(self, limit: int = 20) -> list[DedupRecord]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT title, link, inserted_at FROM articles "
                    "ORDER BY inserted_at DESC, id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise DedupStoreError("recent() failed", {"error": str(exc)}) from exc
        return [DedupRecord(row["title"], row["link"], row["inserted_at"]) for row in rows]

    def reset(self) -> None:
        with self._lock:
            self.manager.reset(self.db_path)
            self._conn = self.manager.connect(self.db_path)

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error:
            pass


__all__ = ["DedupRecord", "DedupStore"]
