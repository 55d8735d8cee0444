"""
Adapters layer - Slot stores (in-memory, JSON file, REST API).
"""

from .http_store import HttpSlotStore
from .json_file_store import JsonFileSlotStore
from .memory_store import InMemorySlotStore

__all__ = ["HttpSlotStore", "InMemorySlotStore", "JsonFileSlotStore"]
