"""When should a non-held order confirm itself?"""

from __future__ import annotations

from datetime import datetime, timedelta

from intake.domain.service.business_hours import BusinessHours

DEFAULT_DELAY_HOURS = 6  # admin review window + auto-confirm grace
DEFAULT_OFFSET_HOURS = 4


def compute_auto_confirm_at(
    now: datetime,
    hours: BusinessHours,
    delay_hours: int = DEFAULT_DELAY_HOURS,
    offset_hours: int = DEFAULT_OFFSET_HOURS,
) -> datetime:
    """Return the instant the scheduler should confirm the order.

    During business hours: ``now + delay_hours``. Outside them (including
    the closed weekday): the next opening plus ``offset_hours``.
    """
    if hours.is_open(now):
        return now + timedelta(hours=delay_hours)
    return hours.next_opening(now) + timedelta(hours=offset_hours)
