"""Internal storage structures backing the LRU engine."""

from .recency import RecencyList
from .slots import Slot, SlotTable

__all__ = ["RecencyList", "Slot", "SlotTable"]
