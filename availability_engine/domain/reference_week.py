"""
Anchor recurring weekly times to a concrete calendar week.

Weekly slots carry no date, so UTC offsets (and DST) are resolved against
the week that contains a reference date. All week-relative values are
minutes since Sunday 00:00 UTC of that week.
"""

from datetime import date, timedelta
from typing import Optional, Tuple

import pendulum
from pendulum import DateTime

from .validation import DAYS_PER_WEEK, MINUTES_PER_DAY, validate_timezone

MINUTES_PER_WEEK = DAYS_PER_WEEK * MINUTES_PER_DAY


class ReferenceWeek:
    """
    The calendar week used to turn (day-of-week, HH:MM, timezone) triples
    into absolute instants.
    """

    def __init__(self, reference_date: Optional[date] = None):
        self.reference_date = reference_date or pendulum.today("UTC").date()
        offset = self.reference_date.isoweekday() % DAYS_PER_WEEK  # Sunday = 0
        sunday = self.reference_date - timedelta(days=offset)
        self.start: DateTime = pendulum.datetime(sunday.year, sunday.month, sunday.day, tz="UTC")

    def local_datetime(self, day_of_week: int, minutes: int, timezone: str) -> DateTime:
        """Return the instant of ``day_of_week`` at ``minutes`` past local midnight."""
        day = self.start.add(days=day_of_week)
        return pendulum.datetime(
            day.year,
            day.month,
            day.day,
            minutes // 60,
            minutes % 60,
            tz=validate_timezone(timezone),
        )

    def to_week_minutes(self, day_of_week: int, minutes: int, timezone: str) -> int:
        """
        Convert a local weekly time to minutes since the UTC week start.

        The result may be negative or exceed one week; callers wrap it.
        """
        instant = self.local_datetime(day_of_week, minutes, timezone)
        return int(instant.timestamp() - self.start.timestamp()) // 60

    def at(self, week_minutes: int, timezone: str) -> DateTime:
        """Return the instant ``week_minutes`` after the week start, in ``timezone``."""
        return self.start.add(minutes=week_minutes).in_timezone(validate_timezone(timezone))

    def convert(
        self,
        day_of_week: int,
        minutes: int,
        from_timezone: str,
        to_timezone: str,
    ) -> Tuple[int, int]:
        """
        Re-express a weekly time in another timezone.

        Returns:
            Tuple of (day_of_week, minutes since local midnight)
        """
        if from_timezone == to_timezone:
            return day_of_week, minutes

        instant = self.local_datetime(day_of_week, minutes, from_timezone)
        local = instant.in_timezone(validate_timezone(to_timezone))
        return local.isoweekday() % DAYS_PER_WEEK, local.hour * 60 + local.minute


def wrap_week_range(start: int, end: int) -> Tuple[Tuple[int, int], ...]:
    """
    Fold a week-minute range into ``[0, MINUTES_PER_WEEK)``.

    A range that crosses the end of the week is split into two pieces.
    """
    shift = (start // MINUTES_PER_WEEK) * MINUTES_PER_WEEK
    start -= shift
    end -= shift

    if end <= MINUTES_PER_WEEK:
        return ((start, end),)

    return ((start, MINUTES_PER_WEEK), (0, end - MINUTES_PER_WEEK))
