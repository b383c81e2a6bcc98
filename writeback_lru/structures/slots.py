"""Packed slot storage with free-id reuse."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Generic, Iterator, List, Optional, Tuple, TypeVar

I = TypeVar("I")
V = TypeVar("V")


@dataclass
class Slot(Generic[I, V]):
    """One resident ``(index, item, dirty)`` triple.

    Attributes
    ----------
    index: I
        Client-supplied identifier of the item.
    item: V
        The cached payload.
    dirty: bool
        True once the item was inserted or handed out for mutation while
        resident. Never cleared until eviction.
    weight: int
        Backend weight recorded when the item was admitted.
    """

    index: I
    item: V
    dirty: bool
    weight: int = 1


class SlotTable(Generic[I, V]):
    """Growable vector of optional slots plus a FIFO queue of free ids.

    Slot ids are stable for the lifetime of their occupant.
    """

    def __init__(self) -> None:
        self._slots: List[Optional[Slot[I, V]]] = []
        self._free: Deque[int] = deque()

    def __len__(self) -> int:
        """Number of occupied slots."""
        return len(self._slots) - len(self._free)

    def __getitem__(self, slot_id: int) -> Slot[I, V]:
        slot = self._slots[slot_id]
        if slot is None:
            raise KeyError(f"slot {slot_id} is free")
        return slot

    def allocate(self, slot: Slot[I, V]) -> int:
        """Store ``slot`` in a free id if one exists, else append."""
        if self._free:
            slot_id = self._free.popleft()
            self._slots[slot_id] = slot
        else:
            slot_id = len(self._slots)
            self._slots.append(slot)
        return slot_id

    def free(self, slot_id: int) -> Slot[I, V]:
        """Vacate ``slot_id`` and return its former occupant."""
        slot = self[slot_id]
        self._slots[slot_id] = None
        self._free.append(slot_id)
        return slot

    def occupied(self) -> Iterator[Tuple[int, Slot[I, V]]]:
        for slot_id, slot in enumerate(self._slots):
            if slot is not None:
                yield slot_id, slot

    @property
    def free_ids(self) -> List[int]:
        return list(self._free)

    @property
    def table_size(self) -> int:
        return len(self._slots)
