"""
Core business logic for intersecting two users' weekly availability.

Pure domain logic: no store access, no I/O.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from pendulum import DateTime

from .models import AvailabilitySlot, MinuteRange, OverlapWindow, merge_ranges
from .reference_week import ReferenceWeek, wrap_week_range
from .validation import DAYS_PER_WEEK, MINUTES_PER_DAY, format_minutes, validate_timezone

logger = logging.getLogger(__name__)


class OverlapCalculator:
    """
    Calculates the windows in which two users are both available.

    Algorithm:
    1. Drop inactive slots
    2. Normalize every slot to UTC minutes-of-week using its own timezone,
       wrapping ranges that cross the week boundary
    3. Merge each user's own ranges (union) so nothing is counted twice
    4. Intersect the two merged lists
    5. Resolve the result back to the first user's timezone, split at
       local midnight, sorted by day then start time

    Working on the whole week covers slots that normalization pushes onto
    the previous or next day.
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        display_timezone: Optional[str] = None,
    ):
        self.week = ReferenceWeek(reference_date)
        self.display_timezone = validate_timezone(display_timezone) if display_timezone else None

    def compute_overlap(
        self,
        slots_a: Sequence[AvailabilitySlot],
        slots_b: Sequence[AvailabilitySlot],
    ) -> List[OverlapWindow]:
        """
        Compute the overlap windows between two slot collections.

        Args:
            slots_a: Slots of the first user (output is expressed in their timezone)
            slots_b: Slots of the second user

        Returns:
            Non-empty overlap windows sorted by day of week and start time;
            an empty list when the users never overlap
        """
        ranges_a = self.normalize(slots_a)
        ranges_b = self.normalize(slots_b)

        if not ranges_a or not ranges_b:
            return []

        common = self._intersect_two_lists(ranges_a, ranges_b)
        timezone = self._resolve_display_timezone(slots_a)
        windows = self._to_windows(common, timezone)

        logger.debug(
            "Overlap of %d and %d ranges produced %d window(s) in %s",
            len(ranges_a),
            len(ranges_b),
            len(windows),
            timezone,
        )
        return windows

    def normalize(self, slots: Iterable[AvailabilitySlot]) -> List[MinuteRange]:
        """
        Convert active slots into merged UTC minutes-of-week ranges.
        """
        ranges: List[MinuteRange] = []

        for slot in slots:
            if not slot.is_active:
                continue

            start = self.week.to_week_minutes(slot.day_of_week, slot.start_minutes, slot.timezone)
            end = self.week.to_week_minutes(slot.day_of_week, slot.end_minutes, slot.timezone)

            # A DST gap can swallow a slot entirely
            if end <= start:
                logger.debug("Skipping slot %s collapsed by timezone transition", slot.id)
                continue

            for piece_start, piece_end in wrap_week_range(start, end):
                ranges.append(MinuteRange(start=piece_start, end=piece_end))

        return merge_ranges(ranges)

    def _resolve_display_timezone(self, slots: Sequence[AvailabilitySlot]) -> str:
        """
        Pick the timezone output windows are expressed in.

        An explicit display timezone wins; otherwise the timezone of the
        user's earliest active slot in the week.
        """
        if self.display_timezone:
            return self.display_timezone

        active = sorted(
            (slot for slot in slots if slot.is_active),
            key=lambda s: (s.day_of_week, s.start_minutes),
        )
        return active[0].timezone if active else "UTC"

    def _intersect_two_lists(
        self,
        list1: List[MinuteRange],
        list2: List[MinuteRange],
    ) -> List[MinuteRange]:
        """
        Calculate intersection of two lists of ranges.

        Both inputs are sorted and merged, so a single sweep suffices.
        """
        intersections: List[MinuteRange] = []
        i = j = 0

        while i < len(list1) and j < len(list2):
            intersection = list1[i].intersect(list2[j])
            if intersection:
                intersections.append(intersection)

            # Advance whichever range finishes first
            if list1[i].end < list2[j].end:
                i += 1
            else:
                j += 1

        return intersections

    def _to_windows(self, ranges: List[MinuteRange], timezone: str) -> List[OverlapWindow]:
        """Express week ranges as per-day windows in ``timezone``."""
        windows: List[OverlapWindow] = []

        for week_range in ranges:
            local_start = self.week.at(week_range.start, timezone)
            local_end = self.week.at(week_range.end, timezone)
            windows.extend(self._split_at_midnight(local_start, local_end, timezone))

        # Stable sort: a repeated local hour keeps its UTC order
        windows.sort(key=lambda w: (w.day_of_week, w.start_time))
        return self._join_touching_windows(windows)

    @staticmethod
    def _split_at_midnight(
        local_start: DateTime,
        local_end: DateTime,
        timezone: str,
    ) -> List[OverlapWindow]:
        windows: List[OverlapWindow] = []
        cursor = local_start

        while cursor < local_end:
            next_midnight = cursor.add(days=1).start_of("day")
            segment_end = min(local_end, next_midnight)

            start_minute = cursor.hour * 60 + cursor.minute
            if segment_end == next_midnight:
                end_minute = MINUTES_PER_DAY
            else:
                end_minute = segment_end.hour * 60 + segment_end.minute

            windows.append(
                OverlapWindow(
                    day_of_week=cursor.isoweekday() % DAYS_PER_WEEK,
                    start_time=format_minutes(start_minute),
                    end_time=format_minutes(end_minute),
                    duration_minutes=int(segment_end.timestamp() - cursor.timestamp()) // 60,
                    timezone=timezone,
                    utc_offset=cursor.format("Z"),
                )
            )
            cursor = segment_end

        return windows

    @staticmethod
    def _join_touching_windows(windows: List[OverlapWindow]) -> List[OverlapWindow]:
        """
        Join windows that meet on the same day.

        Happens when a range wrapped at the UTC week boundary lands in the
        middle of a local day.
        """
        joined: List[OverlapWindow] = []

        for window in windows:
            last = joined[-1] if joined else None
            if (
                last is not None
                and last.day_of_week == window.day_of_week
                and last.end_time == window.start_time
                and last.utc_offset == window.utc_offset
            ):
                joined[-1] = OverlapWindow(
                    day_of_week=last.day_of_week,
                    start_time=last.start_time,
                    end_time=window.end_time,
                    duration_minutes=last.duration_minutes + window.duration_minutes,
                    timezone=last.timezone,
                    utc_offset=last.utc_offset,
                )
            else:
                joined.append(window)

        return joined
