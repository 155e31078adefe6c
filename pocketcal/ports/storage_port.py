"""Storage port — abstract key-value persistence.

The event store depends on this protocol, never on a specific backend.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when a storage backend fails to read or write."""


class StoragePort(Protocol):
    """Key-value string storage used by the event store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...
