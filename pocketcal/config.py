"""
PocketCal — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from pocketcal/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Storage backend: "sqlite" | "memory"
    STORAGE_BACKEND: str = "sqlite"

    # SQLite
    DATABASE_PATH: str = "data/pocketcal.db"

    # Key-value layout (same keys the browser build used)
    STORAGE_EVENTS_KEY: str = "calendar-events"
    STORAGE_THEME_KEY: str = "calendar-theme"

    # Presentation defaults
    DEFAULT_THEME: str = "dark"
    DEFAULT_VIEW: str = "month"

    # First run: create two sample records when nothing is stored
    SEED_SAMPLE_EVENTS: bool = True

    # Base of the self-referential share/import links
    IMPORT_BASE_URL: str = "https://pocketcal.local/"

    LOG_LEVEL: str = "INFO"

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v: str) -> str:
        backend = str(v).strip().lower()
        if backend not in ("sqlite", "memory"):
            raise ValueError(f"Unknown STORAGE_BACKEND: {v!r}")
        return backend

    @field_validator("DEFAULT_THEME", mode="before")
    @classmethod
    def parse_theme(cls, v: str) -> str:
        theme = str(v).strip().lower()
        if theme not in ("dark", "light"):
            raise ValueError(f"Unknown DEFAULT_THEME: {v!r}")
        return theme

    @field_validator("DEFAULT_VIEW", mode="before")
    @classmethod
    def parse_view(cls, v: str) -> str:
        view = str(v).strip().lower()
        if view not in ("month", "week"):
            raise ValueError(f"Unknown DEFAULT_VIEW: {v!r}")
        return view

    @field_validator("SEED_SAMPLE_EVENTS", mode="before")
    @classmethod
    def parse_bool(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in _TRUTHY

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        STORAGE_BACKEND=os.getenv("STORAGE_BACKEND", "sqlite"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/pocketcal.db"),
        STORAGE_EVENTS_KEY=os.getenv("STORAGE_EVENTS_KEY", "calendar-events"),
        STORAGE_THEME_KEY=os.getenv("STORAGE_THEME_KEY", "calendar-theme"),
        DEFAULT_THEME=os.getenv("DEFAULT_THEME", "dark"),
        DEFAULT_VIEW=os.getenv("DEFAULT_VIEW", "month"),
        SEED_SAMPLE_EVENTS=os.getenv("SEED_SAMPLE_EVENTS", "true"),
        IMPORT_BASE_URL=os.getenv("IMPORT_BASE_URL", "https://pocketcal.local/"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from pocketcal.config import settings
settings = _load_settings()
