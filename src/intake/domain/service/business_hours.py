"""Store business hours and the order-acceptance gate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class BusinessHours:
    """Daily opening window ``[open_hour, close_hour)`` with one closed weekday."""

    open_hour: int = 8
    close_hour: int = 17
    closed_weekday: int = 6  # Sunday

    def is_open(self, now: datetime) -> bool:
        if now.weekday() == self.closed_weekday:
            return False
        return self.open_hour <= now.hour < self.close_hour

    def next_opening(self, now: datetime) -> datetime:
        """The first opening time at or after *now* on a business day."""
        candidate = now.replace(hour=self.open_hour, minute=0, second=0, microsecond=0)
        if candidate < now:
            candidate += timedelta(days=1)
        while candidate.weekday() == self.closed_weekday:
            candidate += timedelta(days=1)
        return candidate


class BusinessHoursGate(ABC):
    """Decides whether checkout is accepting orders at all right now."""

    @abstractmethod
    def is_accepting_orders(self, now: datetime) -> bool:
        """Return True if a checkout at *now* may proceed."""


class StoreHoursGate(BusinessHoursGate):
    """Accept orders only while the store is open."""

    def __init__(self, hours: BusinessHours) -> None:
        self.hours = hours

    def is_accepting_orders(self, now: datetime) -> bool:
        return self.hours.is_open(now)
