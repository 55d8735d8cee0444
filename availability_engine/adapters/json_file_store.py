"""
Slot store that reads availability records from a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from ..domain.exceptions import SlotStoreError
from ..domain.models import AvailabilitySlot
from .memory_store import InMemorySlotStore

logger = logging.getLogger(__name__)

SAMPLE_DATA_FILE = Path(__file__).parent / "sample_availability.json"


class JsonFileSlotStore(InMemorySlotStore):
    """
    Loads slot records in the web layer's camelCase shape.

    The file holds either a list of records or an object with an
    ``availability`` list. Malformed records are skipped with a warning.
    """

    def __init__(self, data_file: Optional[Path] = None):
        super().__init__()
        self.data_file = Path(data_file) if data_file else SAMPLE_DATA_FILE
        for slot in self._load_records():
            self.add(slot)

    def _load_records(self) -> List[AvailabilitySlot]:
        if not self.data_file.exists():
            raise SlotStoreError(f"Availability data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data: Any = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SlotStoreError(f"Could not read availability data from {self.data_file}: {exc}") from exc

        records = data.get("availability", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise SlotStoreError(f"Availability data in {self.data_file} must be a list of records")

        slots: List[AvailabilitySlot] = []
        for index, record in enumerate(records):
            try:
                slots.append(AvailabilitySlot.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping availability record %d in %s: %s", index, self.data_file, exc)

        logger.debug("Loaded %d slot(s) from %s", len(slots), self.data_file)
        return slots
