"""Persistent key-value storage backing the location cache.

The sqlite store keeps string values in a ``metadata`` table so a resolved
location survives process restarts. An unreadable or corrupt database file
degrades to misses and dropped writes instead of failing the caller. The
in-memory store has the same contract and is used for tests and ephemeral
setups.
"""

from __future__ import annotations

import logging
from pathlib import Path
import sqlite3
from typing import Dict, Optional, Protocol

logger = logging.getLogger("currency_localizer.storage")

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SqliteKeyValueStore:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _ensure_schema(self) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS metadata (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL DEFAULT ({UTC_NOW_SQL})
                    )
                    """
                )
        except sqlite3.DatabaseError as e:
            logger.warning("key-value store %s unusable: %s", self.db_path, e)

    # ------------------------------------------------------------------
    def get(self, key: str) -> Optional[str]:
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                cur.execute("SELECT value FROM metadata WHERE key=?", (key,))
                row = cur.fetchone()
        except sqlite3.DatabaseError as e:
            logger.warning("reading %s failed, treating as miss: %s", key, e)
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO metadata(key,value) VALUES(?,?) ON CONFLICT(key) DO UPDATE "
                    f"SET value=excluded.value, updated_at=({UTC_NOW_SQL})",
                    (key, value),
                )
        except sqlite3.DatabaseError as e:
            logger.warning("writing %s failed, value not persisted: %s", key, e)

    def delete(self, key: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM metadata WHERE key=?", (key,))
        except sqlite3.DatabaseError as e:
            logger.warning("deleting %s failed: %s", key, e)


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
