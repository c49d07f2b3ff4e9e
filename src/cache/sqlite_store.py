# src/cache/sqlite_store.py - v2
"""SQLite-based state store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 - no external dependency. One database holds every
workspace; rows are scoped by namespace.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from smelltrack.cache.base_state_store import BaseStateStore

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS state_entries (
    namespace TEXT NOT NULL,
    bucket TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (namespace, bucket, key)
);
CREATE INDEX IF NOT EXISTS idx_state_bucket ON state_entries(namespace, bucket);
"""


class SqliteStateStore(BaseStateStore):
    """SQLite-backed state store."""

    def __init__(self, db_path: Path | str, namespace: str = "default") -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._namespace = namespace
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, bucket: str, key: str) -> Any | None:
        cursor = self._conn.execute(
            "SELECT value FROM state_entries WHERE namespace = ? AND bucket = ? AND key = ?",
            (self._namespace, bucket, key),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode %s/%s: %s", bucket, key, e)
            return None

    async def put(self, bucket: str, key: str, value: Any) -> None:
        """Store a value (upsert)."""
        self._conn.execute(
            """INSERT OR REPLACE INTO state_entries (namespace, bucket, key, value)
               VALUES (?, ?, ?, ?)""",
            (self._namespace, bucket, key, json.dumps(value)),
        )
        self._conn.commit()

    async def delete(self, bucket: str, key: str) -> None:
        self._conn.execute(
            "DELETE FROM state_entries WHERE namespace = ? AND bucket = ? AND key = ?",
            (self._namespace, bucket, key),
        )
        self._conn.commit()

    async def items(self, bucket: str) -> dict[str, Any]:
        cursor = self._conn.execute(
            "SELECT key, value FROM state_entries WHERE namespace = ? AND bucket = ? ORDER BY rowid",
            (self._namespace, bucket),
        )
        result: dict[str, Any] = {}
        for key, value in cursor.fetchall():
            try:
                result[key] = json.loads(value)
            except json.JSONDecodeError:
                continue
        return result

    async def clear(self, *buckets: str) -> None:
        """Delete every row of the given buckets inside one transaction."""
        with self._conn:
            for bucket in buckets:
                self._conn.execute(
                    "DELETE FROM state_entries WHERE namespace = ? AND bucket = ?",
                    (self._namespace, bucket),
                )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
