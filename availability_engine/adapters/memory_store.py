"""
In-process slot store backed by a dictionary.
"""

from typing import Dict, Iterable, List, Sequence

from ..domain.exceptions import UserNotFound
from ..domain.models import AvailabilitySlot


class InMemorySlotStore:
    """
    Holds availability slots grouped by user.

    Used by tests and by callers that already have slot data in memory.
    """

    def __init__(self, slots: Iterable[AvailabilitySlot] = ()):
        self._slots: Dict[str, List[AvailabilitySlot]] = {}
        for slot in slots:
            self.add(slot)

    def add(self, slot: AvailabilitySlot) -> None:
        """Register a slot under its owning user."""
        self._slots.setdefault(slot.user_id, []).append(slot)

    def user_ids(self) -> List[str]:
        """Return all known user ids in insertion order."""
        return list(self._slots)

    def get_slots_for_user(self, user_id: str) -> List[AvailabilitySlot]:
        """
        Return every slot of a user, active or not.

        Raises:
            UserNotFound: If the store holds no slots for the user
        """
        if user_id not in self._slots:
            raise UserNotFound(user_id)
        return list(self._slots[user_id])

    def get_slots_for_users(self, user_ids: Sequence[str]) -> Dict[str, List[AvailabilitySlot]]:
        """Return slots per user; unknown users are omitted."""
        return {
            user_id: list(self._slots[user_id])
            for user_id in user_ids
            if user_id in self._slots
        }
