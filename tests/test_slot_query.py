"""
Tests for bookable slot generation and point-in-time availability.
"""

from datetime import date

import pytest

from availability_engine.domain.exceptions import InvalidTimeFormat, InvalidTimezone
from availability_engine.domain.models import AvailabilitySlot, TimeSlot
from availability_engine.domain.slot_query import SlotQuery


def _slot(day, start, end, timezone="UTC", is_active=True, slot_id=None):
    return AvailabilitySlot(
        id=slot_id or f"{day}-{start}",
        user_id="u1",
        day_of_week=day,
        start_time=start,
        end_time=end,
        timezone=timezone,
        is_active=is_active,
    )


@pytest.fixture
def query():
    return SlotQuery(reference_date=date(2024, 1, 10))


class TestAvailableTimeSlots:
    """Tests for partitioning windows into bookable slots."""

    def test_trailing_remainder_is_dropped(self, query):
        """A 70-minute window at 30 minutes yields two slots, not three."""
        slots = query.get_available_time_slots([_slot(1, "09:00", "10:10")], 1, 30)

        assert slots == [
            TimeSlot(1, "09:00", "09:30", "UTC"),
            TimeSlot(1, "09:30", "10:00", "UTC"),
        ]

    def test_exact_fit(self, query):
        slots = query.get_available_time_slots([_slot(1, "09:00", "11:00")], 1, 60)

        assert [(s.start_time, s.end_time) for s in slots] == [("09:00", "10:00"), ("10:00", "11:00")]

    def test_chronological_across_windows(self, query):
        windows = [_slot(1, "14:00", "15:00"), _slot(1, "09:00", "10:00")]

        slots = query.get_available_time_slots(windows, 1, 60)

        assert [s.start_time for s in slots] == ["09:00", "14:00"]

    def test_window_shorter_than_duration(self, query):
        assert query.get_available_time_slots([_slot(1, "09:00", "09:20")], 1, 30) == []

    def test_other_days_and_inactive_are_ignored(self, query):
        windows = [_slot(2, "09:00", "12:00"), _slot(1, "09:00", "12:00", is_active=False)]

        assert query.get_available_time_slots(windows, 1, 30) == []

    def test_overlapping_windows_do_not_duplicate(self, query):
        windows = [_slot(1, "09:00", "10:00", slot_id="a"), _slot(1, "09:00", "11:00", slot_id="b")]

        slots = query.get_available_time_slots(windows, 1, 60)

        assert [(s.start_time, s.end_time) for s in slots] == [("09:00", "10:00"), ("10:00", "11:00")]

    def test_partly_overlapping_windows_are_merged(self, query):
        """Bookable slots never overlap each other."""
        windows = [_slot(1, "09:00", "10:00", slot_id="a"), _slot(1, "09:15", "10:15", slot_id="b")]

        slots = query.get_available_time_slots(windows, 1, 30)

        assert [(s.start_time, s.end_time) for s in slots] == [("09:00", "09:30"), ("09:30", "10:00")]

    def test_touching_windows_are_partitioned_as_one(self, query):
        windows = [_slot(1, "09:00", "09:45", slot_id="a"), _slot(1, "09:45", "10:30", slot_id="b")]

        slots = query.get_available_time_slots(windows, 1, 30)

        assert [s.start_time for s in slots] == ["09:00", "09:30", "10:00"]

    def test_mixed_timezones_ordered_by_instant(self, query):
        """Berlin 10:00 is 09:00 UTC; New York 09:30 is 14:30 UTC."""
        windows = [
            _slot(1, "09:30", "10:30", "America/New_York", slot_id="ny"),
            _slot(1, "10:00", "11:00", "Europe/Berlin", slot_id="berlin"),
        ]

        slots = query.get_available_time_slots(windows, 1, 60)

        assert [(s.start_time, s.timezone) for s in slots] == [
            ("10:00", "Europe/Berlin"),
            ("09:30", "America/New_York"),
        ]

    def test_longest_duration_and_end_of_day(self, query):
        slots = query.get_available_time_slots([_slot(5, "15:59", "23:59")], 5, 480)

        assert slots == [TimeSlot(5, "15:59", "23:59", "UTC")]

    @pytest.mark.parametrize("duration", [14, 481])
    def test_duration_out_of_range(self, query, duration):
        with pytest.raises(InvalidTimeFormat):
            query.get_available_time_slots([], 1, duration)

    def test_day_out_of_range(self, query):
        with pytest.raises(InvalidTimeFormat):
            query.get_available_time_slots([], 7, 30)


class TestIsAvailableAt:
    """Tests for the single-user availability check."""

    def test_half_open_interval(self, query):
        windows = [_slot(1, "09:00", "11:00")]

        assert query.is_available_at(windows, 1, "09:00")
        assert query.is_available_at(windows, 1, "10:59")
        assert not query.is_available_at(windows, 1, "11:00")
        assert not query.is_available_at(windows, 1, "08:59")

    def test_other_day(self, query):
        assert not query.is_available_at([_slot(1, "09:00", "11:00")], 2, "10:00")

    def test_inactive_slot(self, query):
        assert not query.is_available_at([_slot(1, "09:00", "11:00", is_active=False)], 1, "10:00")

    def test_timezone_conversion_moves_day(self, query):
        """Monday 23:30 at UTC-5 is Tuesday 04:30 UTC."""
        windows = [_slot(2, "04:00", "05:00")]

        assert query.is_available_at(windows, 1, "23:30", "Etc/GMT+5")
        assert not query.is_available_at(windows, 1, "23:30")

    def test_same_timezone_is_not_converted(self, query):
        windows = [_slot(1, "09:00", "10:00", timezone="Europe/Berlin")]

        assert query.is_available_at(windows, 1, "09:30", "Europe/Berlin")
        assert not query.is_available_at(windows, 1, "09:30", "UTC")
        assert query.is_available_at(windows, 1, "08:30", "UTC")

    def test_invalid_time(self, query):
        with pytest.raises(InvalidTimeFormat):
            query.is_available_at([_slot(1, "09:00", "10:00")], 1, "9:75")

    def test_invalid_timezone(self, query):
        with pytest.raises(InvalidTimezone):
            query.is_available_at([_slot(1, "09:00", "10:00")], 1, "09:30", "Moon/Base")
