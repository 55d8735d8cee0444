"""
Domain-specific exception hierarchy for the availability engine.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormat(AvailabilityError, ValueError):
    """Raised when a time, day-of-week or duration value is malformed or out of range."""


class InvalidTimezone(AvailabilityError, ValueError):
    """Raised when a timezone identifier is not a known IANA zone."""


class UserNotFound(AvailabilityError, LookupError):
    """Raised when no slot data exists for a user."""

    def __init__(self, user_id: str):
        super().__init__(f"No availability found for user '{user_id}'")
        self.user_id = user_id


class SlotStoreError(AvailabilityError):
    """Raised when slot data cannot be fetched or parsed from a store."""
