"""Presenter port — abstract interface for whatever draws the calendar.

Presenters subscribe to the event store and re-read its state on every
notification.
"""

from __future__ import annotations

from typing import Protocol


class PresenterPort(Protocol):
    """Abstract presentation interface used by the entry point."""

    def render(self) -> None: ...
