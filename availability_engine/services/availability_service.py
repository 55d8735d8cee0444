"""
Application services for availability queries.

The service fetches slot data via a store adapter and delegates every
computation to the domain components. Depending on a protocol keeps the
CLI and web handlers thin and lets tests plug in an in-memory store.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from ..domain.exceptions import UserNotFound
from ..domain.match_finder import MatchFinder
from ..domain.models import (
    AvailabilitySlot,
    MatchCandidate,
    OverlapWindow,
    TimeSlot,
    UserSlots,
    WeeklySummary,
)
from ..domain.overlap_calculator import OverlapCalculator
from ..domain.slot_query import SlotQuery
from ..domain.validation import validate_day_of_week

logger = logging.getLogger(__name__)


class SlotStoreProtocol(Protocol):
    """Protocol describing the slot store behaviour needed by the service."""

    def get_slots_for_user(self, user_id: str) -> List[AvailabilitySlot]:
        """Return the slots of one user or raise ``UserNotFound``."""

    def get_slots_for_users(self, user_ids: Sequence[str]) -> Dict[str, List[AvailabilitySlot]]:
        """Return slots per known user."""


class AvailabilityService:
    """
    Orchestrates slot retrieval and availability computations.

    Stateless apart from its collaborators; every call reads the store once
    (or once per requested user batch).
    """

    def __init__(
        self,
        store: SlotStoreProtocol,
        overlap_calculator: Optional[OverlapCalculator] = None,
        slot_query: Optional[SlotQuery] = None,
    ) -> None:
        self._store = store
        self._overlap_calculator = overlap_calculator or OverlapCalculator()
        self._match_finder = MatchFinder(self._overlap_calculator)
        self._slot_query = slot_query or SlotQuery(self._overlap_calculator.week.reference_date)

    def get_user_availability(
        self,
        user_id: str,
        *,
        day_of_week: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[AvailabilitySlot]:
        """Return a user's slots ordered by day and start time, optionally filtered."""
        if day_of_week is not None:
            validate_day_of_week(day_of_week)

        slots = [
            slot
            for slot in self._store.get_slots_for_user(user_id)
            if (day_of_week is None or slot.day_of_week == day_of_week)
            and (is_active is None or slot.is_active == is_active)
        ]
        return sorted(slots, key=lambda s: (s.day_of_week, s.start_minutes))

    def get_overlap(self, user_id: str, other_user_id: str) -> List[OverlapWindow]:
        """Overlap windows between two users, in the first user's timezone."""
        slots = self._ensure_slot_entries(
            [user_id, other_user_id],
            self._store.get_slots_for_users([user_id, other_user_id]),
            required=[user_id, other_user_id],
        )
        return self._overlap_calculator.compute_overlap(slots[user_id], slots[other_user_id])

    def find_matches(
        self,
        target_user_id: str,
        candidate_user_ids: Sequence[str],
        min_overlap_minutes: int,
    ) -> List[MatchCandidate]:
        """
        Rank the given candidates by shared availability with the target.

        Candidates the store does not know are treated as having no availability.
        """
        user_ids = [target_user_id] + [uid for uid in candidate_user_ids if uid != target_user_id]
        slots = self._ensure_slot_entries(
            user_ids,
            self._store.get_slots_for_users(user_ids),
            required=[target_user_id],
        )
        pool = [UserSlots(user_id=uid, slots=slots[uid]) for uid in user_ids]

        logger.info("Matching %s against %d candidate(s)", target_user_id, len(pool) - 1)
        return self._match_finder.find_matches(target_user_id, pool, min_overlap_minutes)

    def get_available_time_slots(
        self,
        user_id: str,
        day_of_week: int,
        slot_duration_minutes: int,
    ) -> List[TimeSlot]:
        """Bookable slots of a user on one day."""
        slots = self._store.get_slots_for_user(user_id)
        return self._slot_query.get_available_time_slots(slots, day_of_week, slot_duration_minutes)

    def is_user_available_at(
        self,
        user_id: str,
        day_of_week: int,
        time: str,
        timezone: Optional[str] = None,
    ) -> bool:
        """Whether the user is available at a weekly point in time."""
        slots = self._store.get_slots_for_user(user_id)
        return self._slot_query.is_available_at(slots, day_of_week, time, timezone)

    def get_weekly_summary(self, user_id: str) -> WeeklySummary:
        """Hours of active availability per day for one user."""
        return WeeklySummary.from_slots(self._store.get_slots_for_user(user_id))

    @staticmethod
    def _ensure_slot_entries(
        user_ids: Sequence[str],
        slots: Dict[str, List[AvailabilitySlot]],
        *,
        required: Sequence[str] = (),
    ) -> Dict[str, List[AvailabilitySlot]]:
        """
        Ensure every requested user appears in the slot map.

        Stores omit users they know nothing about; required users raise
        ``UserNotFound``, the rest are normalised to an empty list.
        """
        normalized: Dict[str, List[AvailabilitySlot]] = {}

        for user_id in user_ids:
            if user_id not in slots and user_id in required:
                raise UserNotFound(user_id)
            normalized[user_id] = slots.get(user_id, [])

        return normalized
