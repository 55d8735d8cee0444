"""
Parse-and-validate helpers for the raw values the engine receives.

Every function either returns a typed value or raises one of the named
errors from ``exceptions``; nothing here touches a store.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List, Optional

import pendulum

from .exceptions import InvalidTimeFormat, InvalidTimezone

if TYPE_CHECKING:
    from .models import AvailabilitySlot

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

MINUTES_PER_DAY = 24 * 60
DAYS_PER_WEEK = 7

SLOT_DURATION_RANGE = (15, 480)
MIN_OVERLAP_RANGE = (15, 1440)

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def parse_time(value: str) -> int:
    """
    Parse an ``HH:MM`` string into minutes since midnight.

    Raises:
        InvalidTimeFormat: If the value is not a 24-hour ``HH:MM`` time
    """
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise InvalidTimeFormat(f"Time must be in HH:MM format, got {value!r}")

    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM`` (``24:00`` marks end of day)."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Minutes must be between 0 and {MINUTES_PER_DAY}, got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_day_of_week(value: int) -> int:
    """Ensure a day-of-week index is between 0 (Sunday) and 6 (Saturday)."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < DAYS_PER_WEEK:
        raise InvalidTimeFormat(
            f"Day of week must be between 0 (Sunday) and 6 (Saturday), got {value!r}"
        )
    return value


def validate_timezone(value: str) -> str:
    """
    Ensure a timezone identifier names a known IANA zone.

    Raises:
        InvalidTimezone: If pendulum cannot resolve the identifier
    """
    if not isinstance(value, str) or not value:
        raise InvalidTimezone(f"Timezone must be a non-empty string, got {value!r}")

    try:
        pendulum.timezone(value)
    except (ValueError, KeyError) as exc:
        raise InvalidTimezone(f"Unknown timezone: {value!r}") from exc

    return value


def validate_duration(value: int, minimum: int, maximum: int) -> int:
    """Ensure a minute count lies within ``[minimum, maximum]``."""
    if isinstance(value, bool) or not isinstance(value, int) or not minimum <= value <= maximum:
        raise InvalidTimeFormat(
            f"Duration must be between {minimum} and {maximum} minutes, got {value!r}"
        )
    return value


def find_conflicting_slots(
    existing: Iterable[AvailabilitySlot],
    candidate: AvailabilitySlot,
    exclude_id: Optional[str] = None,
) -> List[AvailabilitySlot]:
    """
    Return the active slots a new or edited slot would overlap.

    Only slots of the same user and day are considered. ``exclude_id`` skips
    the slot being edited so it does not conflict with its previous version.
    """
    conflicts: List[AvailabilitySlot] = []

    for slot in existing:
        if not slot.is_active or slot.id == exclude_id:
            continue
        if slot.user_id != candidate.user_id or slot.day_of_week != candidate.day_of_week:
            continue
        if candidate.start_minutes < slot.end_minutes and candidate.end_minutes > slot.start_minutes:
            conflicts.append(slot)

    return conflicts

