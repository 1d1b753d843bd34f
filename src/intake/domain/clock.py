"""Injectable time source.

Handlers and domain services receive a Clock instead of calling
``datetime.now()`` so that business-hour and auto-confirm logic can be
tested at fixed instants.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local time of the store."""


class SystemClock(Clock):
    """Wall-clock time in the host's local timezone (the store's timezone)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, fixed_time: datetime) -> None:
        self._now = fixed_time

    def now(self) -> datetime:
        return self._now

    def set_time(self, time: datetime) -> None:
        self._now = time

    def advance(self, **delta: float) -> datetime:
        """Move forward by ``timedelta(**delta)`` and return the new time."""
        self._now = self._now + timedelta(**delta)
        return self._now
