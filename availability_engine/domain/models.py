"""
Domain models for weekly availability slots and the values derived from them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from .validation import (
    DAY_NAMES,
    parse_time,
    validate_day_of_week,
    validate_timezone,
)
from .exceptions import InvalidTimeFormat


@dataclass(frozen=True)
class MinuteRange:
    """
    Represents an immutable half-open range ``[start, end)`` of minutes.

    Used for minutes-since-midnight as well as minutes-of-week values.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start minute {self.start} must be before end minute {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "MinuteRange") -> bool:
        """Check if this range overlaps with another (touching ends do not count)."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "MinuteRange") -> "MinuteRange | None":
        """
        Calculate the intersection of two ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return MinuteRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def contains(self, minute: int) -> bool:
        """Check if a minute falls inside the half-open range."""
        return self.start <= minute < self.end


def merge_ranges(ranges: Iterable[MinuteRange]) -> List[MinuteRange]:
    """
    Merge overlapping or adjacent ranges into their sorted union.

    Example: [540-600, 600-660, 630-700] -> [540-700]
    """
    sorted_ranges = sorted(ranges, key=lambda r: (r.start, r.end))
    if not sorted_ranges:
        return []

    merged: List[MinuteRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start <= last.end:
            merged[-1] = MinuteRange(start=last.start, end=max(last.end, current.end))
        else:
            merged.append(current)

    return merged


@dataclass(frozen=True)
class AvailabilitySlot:
    """
    A recurring weekly availability window owned by one user.

    ``day_of_week`` follows the Sunday = 0 convention; times are ``HH:MM`` in
    the slot's own ``timezone``.
    """
    id: str
    user_id: str
    day_of_week: int
    start_time: str
    end_time: str
    timezone: str
    is_active: bool = True

    def __post_init__(self):
        validate_day_of_week(self.day_of_week)
        validate_timezone(self.timezone)
        if parse_time(self.start_time) >= parse_time(self.end_time):
            raise InvalidTimeFormat(
                f"Start time {self.start_time} must be before end time {self.end_time}"
            )

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time(self.end_time)

    def minute_range(self) -> MinuteRange:
        """Return the slot as minutes since local midnight."""
        return MinuteRange(start=self.start_minutes, end=self.end_minutes)

    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AvailabilitySlot":
        """
        Build a slot from a store record.

        Accepts the camelCase keys served by the web layer as well as
        snake_case keys.

        Raises:
            KeyError: If a required field is missing
            TypeError: If ``isActive`` is not a boolean
        """
        def pick(camel: str, snake: str, default: Any = ...) -> Any:
            if camel in record:
                return record[camel]
            if snake in record:
                return record[snake]
            if default is ...:
                raise KeyError(camel)
            return default

        # "false" must not turn into an active slot
        is_active = pick("isActive", "is_active", True)
        if not isinstance(is_active, bool):
            raise TypeError(f"isActive must be a boolean, got {is_active!r}")

        return cls(
            id=str(record["id"]),
            user_id=str(pick("userId", "user_id")),
            day_of_week=pick("dayOfWeek", "day_of_week"),
            start_time=pick("startTime", "start_time"),
            end_time=pick("endTime", "end_time"),
            timezone=record["timezone"],
            is_active=is_active,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "dayOfWeek": self.day_of_week,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "timezone": self.timezone,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class UserSlots:
    """One member of a candidate pool: a user and their slots."""
    user_id: str
    slots: List[AvailabilitySlot] = field(default_factory=list)


@dataclass(frozen=True)
class OverlapWindow:
    """
    Intersection of two users' availability on one day.

    Times are expressed in ``timezone``; ``end_time`` may be ``24:00`` when
    the window reaches local midnight. ``utc_offset`` is the offset in force
    at ``start_time``, which tells apart windows that a DST fall-back maps
    onto the same local hour.
    """
    day_of_week: int
    start_time: str
    end_time: str
    duration_minutes: int
    timezone: str = "UTC"
    utc_offset: str = "+00:00"

    def format_display(self) -> str:
        """
        Format the window for display.
        Format: Weekday | HH:MM – HH:MM (timezone UTC±HH:MM, N min)
        """
        weekday = DAY_NAMES[self.day_of_week]
        return (
            f"{weekday} | {self.start_time} – {self.end_time} "
            f"({self.timezone} UTC{self.utc_offset}, {self.duration_minutes} min)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration_minutes,
            "timezone": self.timezone,
            "utcOffset": self.utc_offset,
        }


@dataclass(frozen=True)
class MatchCandidate:
    """A candidate whose availability overlaps the target's."""
    user_id: str
    total_overlap_minutes: int
    overlap_windows: List[OverlapWindow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "totalOverlapMinutes": self.total_overlap_minutes,
            "overlaps": [window.to_dict() for window in self.overlap_windows],
        }


@dataclass(frozen=True)
class TimeSlot:
    """A bookable fixed-length sub-interval of an availability window."""
    day_of_week: int
    start_time: str
    end_time: str
    timezone: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "timezone": self.timezone,
        }


@dataclass(frozen=True)
class DailySummary:
    day_of_week: int
    day_name: str
    hours: float
    slots: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayOfWeek": self.day_of_week,
            "dayName": self.day_name,
            "hours": self.hours,
            "slots": self.slots,
        }


@dataclass(frozen=True)
class WeeklySummary:
    """Hours of active availability per day of the week."""
    total_weekly_hours: float
    daily_summary: List[DailySummary]
    total_slots: int

    @classmethod
    def from_slots(cls, slots: List[AvailabilitySlot]) -> "WeeklySummary":
        """Aggregate active slots into per-day hours, rounded to two decimals."""
        active = [slot for slot in slots if slot.is_active]
        minutes_per_day = [0] * len(DAY_NAMES)
        slots_per_day = [0] * len(DAY_NAMES)

        for slot in active:
            minutes_per_day[slot.day_of_week] += slot.duration_minutes()
            slots_per_day[slot.day_of_week] += 1

        daily = [
            DailySummary(
                day_of_week=day,
                day_name=DAY_NAMES[day],
                hours=round(minutes_per_day[day] / 60, 2),
                slots=slots_per_day[day],
            )
            for day in range(len(DAY_NAMES))
        ]

        return cls(
            total_weekly_hours=round(sum(minutes_per_day) / 60, 2),
            daily_summary=daily,
            total_slots=len(active),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalWeeklyHours": self.total_weekly_hours,
            "dailySummary": [day.to_dict() for day in self.daily_summary],
            "totalSlots": self.total_slots,
        }

