"""Storage adapter factory — creates the right adapter based on config."""

from __future__ import annotations

from pocketcal.config import settings
from pocketcal.ports.storage_port import StoragePort


def create_storage(db_path: str | None = None) -> StoragePort:
    """Return the storage adapter matching the STORAGE_BACKEND setting.

    Args:
        db_path: Overrides DATABASE_PATH for the sqlite backend.
    """
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "sqlite":
        from pocketcal.adapters.sqlite_storage import SQLiteStorage

        return SQLiteStorage(db_path=db_path or settings.DATABASE_PATH)

    if backend == "memory":
        from pocketcal.adapters.memory_storage import MemoryStorage

        return MemoryStorage()

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")
