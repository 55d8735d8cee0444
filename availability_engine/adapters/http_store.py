"""
Slot store client for the platform's availability REST API.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..domain.exceptions import SlotStoreError, UserNotFound
from ..domain.models import AvailabilitySlot

logger = logging.getLogger(__name__)


class HttpSlotStore:
    """
    Reads active availability slots over HTTP.

    Uses ``GET {base_url}/availability/users/{id}?isActive=true`` and expects
    the ``{"success": bool, "data": [...], "error": {...}}`` response envelope.
    Requests are not retried.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``https://example.com/api/v1``
            api_token: Optional bearer token
            timeout_seconds: Per-request timeout
            session: Optional preconfigured session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

    def get_slots_for_user(self, user_id: str) -> List[AvailabilitySlot]:
        """
        Fetch the active slots of one user.

        Raises:
            UserNotFound: If the API answers 404
            SlotStoreError: If the request fails or the payload is malformed
        """
        url = f"{self.base_url}/availability/users/{user_id}"

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params={"isActive": "true"},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise SlotStoreError(f"Failed to fetch availability for {user_id}: {e}") from e

        if response.status_code == 404:
            raise UserNotFound(user_id)

        try:
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.HTTPError as e:
            raise SlotStoreError(f"Availability API error for {user_id}: {e}") from e
        except ValueError as e:
            raise SlotStoreError(f"Availability API returned invalid JSON for {user_id}") from e

        return self._parse_envelope(payload, user_id)

    def get_slots_for_users(self, user_ids: Sequence[str]) -> Dict[str, List[AvailabilitySlot]]:
        """Fetch slots for several users; users the API does not know are omitted."""
        slots: Dict[str, List[AvailabilitySlot]] = {}

        for user_id in user_ids:
            try:
                slots[user_id] = self.get_slots_for_user(user_id)
            except UserNotFound:
                logger.info("No availability found for %s, omitting", user_id)

        return slots

    def _parse_envelope(self, payload: Any, user_id: str) -> List[AvailabilitySlot]:
        """
        Parse the response envelope into domain slots.

        Response format:
        {
            "success": true,
            "data": [
                {"id": "...", "userId": "...", "dayOfWeek": 1,
                 "startTime": "09:00", "endTime": "10:00",
                 "timezone": "UTC", "isActive": true}
            ]
        }
        """
        if not isinstance(payload, dict):
            raise SlotStoreError(f"Unexpected availability payload for {user_id}")

        if not payload.get("success", False):
            error = payload.get("error") or {}
            raise SlotStoreError(
                f"Availability API rejected request for {user_id}: "
                f"{error.get('code', 'UNKNOWN')} {error.get('message', '')}".strip()
            )

        records = payload.get("data") or []
        if not isinstance(records, list):
            raise SlotStoreError(f"Availability data for {user_id} must be a list")

        slots: List[AvailabilitySlot] = []
        for record in records:
            try:
                slots.append(AvailabilitySlot.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Could not parse availability record for %s: %s", user_id, e)
                continue

        return slots
