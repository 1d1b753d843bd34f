"""Unit tests for business hours and auto-confirm scheduling."""

from datetime import datetime

from intake.domain.service.auto_confirm import compute_auto_confirm_at
from intake.domain.service.business_hours import BusinessHours, StoreHoursGate

HOURS = BusinessHours(open_hour=8, close_hour=17, closed_weekday=6)

# 2025-03-03 is a Monday; 2025-03-08 Saturday; 2025-03-09 Sunday.


class TestBusinessHours:

    def test_open_during_the_day(self):
        assert HOURS.is_open(datetime(2025, 3, 3, 8, 0))
        assert HOURS.is_open(datetime(2025, 3, 3, 16, 59))

    def test_closed_at_closing_hour(self):
        assert not HOURS.is_open(datetime(2025, 3, 3, 17, 0))

    def test_closed_before_opening(self):
        assert not HOURS.is_open(datetime(2025, 3, 3, 7, 59))

    def test_closed_all_sunday(self):
        assert not HOURS.is_open(datetime(2025, 3, 9, 12, 0))

    def test_gate_follows_hours(self):
        gate = StoreHoursGate(HOURS)
        assert gate.is_accepting_orders(datetime(2025, 3, 3, 12, 0))
        assert not gate.is_accepting_orders(datetime(2025, 3, 9, 12, 0))

    def test_next_opening_after_close_is_tomorrow(self):
        assert HOURS.next_opening(datetime(2025, 3, 3, 18, 0)) == datetime(2025, 3, 4, 8, 0)

    def test_next_opening_before_open_is_today(self):
        assert HOURS.next_opening(datetime(2025, 3, 3, 6, 30)) == datetime(2025, 3, 3, 8, 0)

    def test_next_opening_skips_closed_day(self):
        assert HOURS.next_opening(datetime(2025, 3, 8, 18, 0)) == datetime(2025, 3, 10, 8, 0)


class TestAutoConfirm:

    def test_inside_hours_adds_delay(self):
        now = datetime(2025, 3, 3, 10, 0)
        assert compute_auto_confirm_at(now, HOURS) == datetime(2025, 3, 3, 16, 0)

    def test_delay_may_run_past_closing(self):
        now = datetime(2025, 3, 3, 15, 0)
        assert compute_auto_confirm_at(now, HOURS) == datetime(2025, 3, 3, 21, 0)

    def test_outside_hours_uses_next_opening_plus_offset(self):
        now = datetime(2025, 3, 3, 20, 0)
        assert compute_auto_confirm_at(now, HOURS) == datetime(2025, 3, 4, 12, 0)

    def test_saturday_evening_rolls_to_monday(self):
        now = datetime(2025, 3, 8, 19, 0)
        assert compute_auto_confirm_at(now, HOURS) == datetime(2025, 3, 10, 12, 0)

    def test_custom_delay_and_offset(self):
        now = datetime(2025, 3, 3, 10, 0)
        assert compute_auto_confirm_at(now, HOURS, delay_hours=1) == datetime(2025, 3, 3, 11, 0)
        late = datetime(2025, 3, 3, 22, 0)
        assert compute_auto_confirm_at(late, HOURS, offset_hours=0) == datetime(2025, 3, 4, 8, 0)
