"""
Derives bookable time slots and point-in-time availability from weekly windows.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from .models import AvailabilitySlot, MinuteRange, TimeSlot, merge_ranges
from .reference_week import ReferenceWeek
from .validation import (
    SLOT_DURATION_RANGE,
    format_minutes,
    parse_time,
    validate_day_of_week,
    validate_duration,
    validate_timezone,
)


class SlotQuery:
    """
    Answers per-day questions about one user's availability.
    """

    def __init__(self, reference_date: Optional[date] = None):
        self.week = ReferenceWeek(reference_date)

    def get_available_time_slots(
        self,
        slots: Sequence[AvailabilitySlot],
        day_of_week: int,
        slot_duration_minutes: int,
    ) -> List[TimeSlot]:
        """
        Partition the active windows of a day into fixed-length slots.

        Windows sharing a timezone are merged first, so overlapping or
        touching windows never yield overlapping slots. Each merged window
        then yields consecutive slots of exactly ``slot_duration_minutes``;
        a trailing remainder shorter than that is dropped, so 09:00-10:10 at
        30 minutes gives 09:00-09:30 and 09:30-10:00.

        Returns:
            Slots ordered by the instant they start in the reference week
        """
        validate_day_of_week(day_of_week)
        validate_duration(slot_duration_minutes, *SLOT_DURATION_RANGE)

        ranges_by_timezone: Dict[str, List[MinuteRange]] = defaultdict(list)
        for slot in slots:
            if slot.is_active and slot.day_of_week == day_of_week:
                ranges_by_timezone[slot.timezone].append(slot.minute_range())

        result: List[TimeSlot] = []

        for timezone, ranges in ranges_by_timezone.items():
            for window in merge_ranges(ranges):
                current = window.start
                while current + slot_duration_minutes <= window.end:
                    result.append(
                        TimeSlot(
                            day_of_week=day_of_week,
                            start_time=format_minutes(current),
                            end_time=format_minutes(current + slot_duration_minutes),
                            timezone=timezone,
                        )
                    )
                    current += slot_duration_minutes

        result.sort(
            key=lambda s: (
                self.week.to_week_minutes(day_of_week, parse_time(s.start_time), s.timezone),
                s.timezone,
            )
        )
        return result

    def is_available_at(
        self,
        slots: Sequence[AvailabilitySlot],
        day_of_week: int,
        time: str,
        timezone: Optional[str] = None,
    ) -> bool:
        """
        Check whether ``time`` on ``day_of_week`` falls inside an active slot.

        When ``timezone`` is given the instant is converted into each slot's
        timezone first, which may move it to a neighbouring day. Slots are
        half-open: a slot ending at 11:00 does not cover 11:00.
        """
        validate_day_of_week(day_of_week)
        minutes = parse_time(time)
        if timezone is not None:
            validate_timezone(timezone)

        for slot in slots:
            if not slot.is_active:
                continue

            day, local_minutes = day_of_week, minutes
            if timezone is not None and timezone != slot.timezone:
                day, local_minutes = self.week.convert(day_of_week, minutes, timezone, slot.timezone)

            if slot.day_of_week == day and slot.minute_range().contains(local_minutes):
                return True

        return False
