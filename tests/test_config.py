"""Tests for pocketcal.config — settings validation."""

import pytest
from pydantic import ValidationError

from pocketcal.config import Settings


def test_defaults():
    s = Settings()
    assert s.STORAGE_BACKEND == "sqlite"
    assert s.STORAGE_EVENTS_KEY == "calendar-events"
    assert s.STORAGE_THEME_KEY == "calendar-theme"
    assert s.DEFAULT_THEME == "dark"
    assert s.SEED_SAMPLE_EVENTS is True


def test_normalizes_case():
    s = Settings(STORAGE_BACKEND=" Memory ", DEFAULT_VIEW="WEEK", LOG_LEVEL="debug")
    assert s.STORAGE_BACKEND == "memory"
    assert s.DEFAULT_VIEW == "week"
    assert s.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("raw,expected", [
    ("true", True), ("1", True), ("yes", True), ("false", False), ("0", False), ("", False),
])
def test_seed_flag_parsing(raw, expected):
    assert Settings(SEED_SAMPLE_EVENTS=raw).SEED_SAMPLE_EVENTS is expected


@pytest.mark.parametrize("field,value", [
    ("STORAGE_BACKEND", "redis"),
    ("DEFAULT_THEME", "purple"),
    ("DEFAULT_VIEW", "year"),
])
def test_rejects_unknown_values(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})
