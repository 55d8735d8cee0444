"""
Domain layer - Pure availability logic without external dependencies.
"""

from .match_finder import MatchFinder
from .models import (
    AvailabilitySlot,
    MatchCandidate,
    OverlapWindow,
    TimeSlot,
    UserSlots,
    WeeklySummary,
)
from .overlap_calculator import OverlapCalculator
from .slot_query import SlotQuery

__all__ = [
    "AvailabilitySlot",
    "MatchCandidate",
    "MatchFinder",
    "OverlapCalculator",
    "OverlapWindow",
    "SlotQuery",
    "TimeSlot",
    "UserSlots",
    "WeeklySummary",
]
