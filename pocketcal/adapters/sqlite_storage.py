"""
PocketCal — SQLite key-value storage.

Implements StoragePort on a single two-column table. The whole event
collection lives under one key, the theme preference under another.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pocketcal.ports.storage_port import StorageError

logger = logging.getLogger(__name__)


class SQLiteStorage:
    """SQLite implementation of StoragePort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from pocketcal.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        # ":memory:" databases vanish with their connection, so keep one open.
        self._shared: sqlite3.Connection | None = None
        if db_path == ":memory:":
            self._shared = sqlite3.connect(db_path)
            self._shared.row_factory = sqlite3.Row
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._shared is not None:
            return self._shared
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv table if it doesn't exist."""
        try:
            with self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv (
                        key   TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot initialize {self._db_path}: {exc}") from exc
        logger.debug("kv table initialized at %s", self._db_path)

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never set."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite key."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO kv (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Stored %d chars under %r", len(value), key)
