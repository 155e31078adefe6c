"""In-memory storage adapter — implements StoragePort with a dict.

Nothing survives the process; used for tests and throwaway sessions.
"""

from __future__ import annotations

from collections.abc import Mapping


class MemoryStorage:
    """Dict-backed implementation of StoragePort."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
