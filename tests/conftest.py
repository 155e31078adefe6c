"""Shared test fixtures and configuration.

Sets safe environment defaults before any pocketcal import (in-memory
storage, no sample seeding) and provides a store driven by a fixed clock.
"""

import os

# Patch env vars BEFORE any pocketcal imports
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SEED_SAMPLE_EVENTS", "false")
os.environ.setdefault("IMPORT_BASE_URL", "https://cal.example/")

from datetime import datetime

import pytest

FIXED_NOW = datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def clock():
    """Clock frozen at 2024-03-01 09:00 (a Friday)."""
    return lambda: FIXED_NOW


@pytest.fixture
def memory_storage():
    from pocketcal.adapters.memory_storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def store(memory_storage, clock):
    """Return a loaded, empty EventStore backed by memory storage."""
    from pocketcal.core.event_store import EventStore
    s = EventStore(memory_storage, clock=clock, seed_sample_events=False)
    s.load()
    return s


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_pocketcal.db")
