"""
Service layer helpers that orchestrate slot stores and domain logic.
"""

from .availability_service import AvailabilityService, SlotStoreProtocol

__all__ = ["AvailabilityService", "SlotStoreProtocol"]
