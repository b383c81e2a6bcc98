"""Write-back LRU engine.

The engine coordinates three structures that must stay mutually consistent:

- a key map from index to recency-node handle,
- a recency list of slot ids (head is least recently used),
- a slot table holding ``(index, item, dirty)`` triples.

Items are loaded from the backend on a miss and written back to it exactly
once, on eviction, with a dirty flag telling the backend whether the item was
inserted or handed out for mutation while resident.

The engine is not thread-safe; callers serialize access. An item returned by
:meth:`WriteBackLRU.get` or :meth:`WriteBackLRU.get_mut` should not be relied
on as resident after the next operation on the cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar

from ..backends import CacheBackend
from ..keymaps import HashKeyMap, KeyMap, OrderedKeyMap
from ..structures import RecencyList, Slot, SlotTable

logger = logging.getLogger(__name__)

I = TypeVar("I")
V = TypeVar("V")

DEFAULT_CAPACITY = 10


class CacheInvariantError(RuntimeError):
    """Raised by :meth:`WriteBackLRU.check_invariants` on inconsistent state."""


@dataclass
class CacheStats:
    """Counters describing cache activity since creation or last reset."""

    hits: int = 0
    misses: int = 0
    loads: int = 0
    load_failures: int = 0
    inserts: int = 0
    evictions: int = 0
    dirty_write_backs: int = 0

    @property
    def hit_rate(self) -> float:
        """Ratio of hits to lookups (0.0-1.0)."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class WriteBackLRU(Generic[I, V]):  # pylint: disable=too-many-instance-attributes
    """Capacity-bounded LRU cache in front of a :class:`CacheBackend`.

    Parameters
    ----------
    backend: CacheBackend
        Storage that supplies missing items and receives evicted ones.
    capacity: int
        Upper bound on the sum of item weights, in the backend's weight units.
    key_map: KeyMap, optional
        Index map variant. Defaults to :class:`HashKeyMap`.
    """

    def __init__(
        self,
        backend: CacheBackend[I, V],
        capacity: int = DEFAULT_CAPACITY,
        key_map: Optional[KeyMap[I]] = None,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise ValueError(f"capacity must be an int, got {capacity!r}")
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._backend = backend
        self._weigh: Optional[Callable[[I, V], int]] = getattr(
            backend, "weight", None
        )
        self._capacity = capacity
        self._map: KeyMap[I] = key_map if key_map is not None else HashKeyMap()
        if len(self._map):
            raise ValueError("key_map must be empty")
        self._list = RecencyList()
        self._slots: SlotTable[I, V] = SlotTable()
        self._weight_sum = 0
        self._stats = CacheStats()

    @classmethod
    def new(cls, backend: CacheBackend[I, V]) -> "WriteBackLRU[I, V]":
        """Create a cache with the default capacity of 10."""
        return cls(backend)

    @classmethod
    def with_capacity(
        cls, backend: CacheBackend[I, V], capacity: int
    ) -> "WriteBackLRU[I, V]":
        """Create a cache bounded by ``capacity`` weight units."""
        return cls(backend, capacity=capacity)

    # ---------------- Public API ----------------
    def get(self, index: I) -> Optional[V]:
        """Return the item for ``index``, loading it on a miss.

        Returns None when neither the cache nor the backend holds ``index``.
        """
        slot = self._touch(index, dirty=False)
        return None if slot is None else slot.item

    def get_mut(self, index: I) -> Optional[V]:
        """Like :meth:`get`, but marks the item dirty.

        The item is written back as dirty on eviction whether or not the
        caller actually mutates it.
        """
        slot = self._touch(index, dirty=True)
        return None if slot is None else slot.item

    def modify(self, index: I, func: Callable[[V], V]) -> Optional[V]:
        """Replace the item for ``index`` with ``func(item)`` and mark it dirty.

        Useful for immutable items that cannot be changed through
        :meth:`get_mut`. Returns the new item, or None if not found.

        Raises
        ------
        ValueError
            If ``func`` returns None.
        """
        slot = self._touch(index, dirty=True)
        if slot is None:
            return None
        new_item = func(slot.item)
        if new_item is None:
            raise ValueError("modify() callback must not return None")
        new_weight = self._weight(index, new_item)
        slot.item = new_item
        self._weight_sum += new_weight - slot.weight
        slot.weight = new_weight
        # The modified slot is the tail, so it is only evicted if alone.
        while len(self._list) > 1 and self._weight_sum > self._capacity:
            self._evict_lru()
        return new_item

    def insert(self, index: I, item: V) -> None:
        """Admit ``item`` under ``index`` as dirty.

        A resident item under the same index is first evicted through the
        normal write-back protocol.
        """
        if item is None:
            raise ValueError("None cannot be cached; it denotes a missing item")
        handle = self._map.get(index)
        if handle is not None:
            self._evict(handle)
        self._stats.inserts += 1
        self._admit(index, item, dirty=True)

    def peek(self, index: I) -> Optional[V]:
        """Return the resident item without promoting, dirtying or loading."""
        handle = self._map.get(index)
        if handle is None:
            return None
        return self._slots[self._list.slot_of(handle)].item

    def flush(self) -> int:
        """Evict every resident item in LRU order; return how many."""
        count = 0
        while len(self._list):
            self._evict_lru()
            count += 1
        if count:
            logger.info("lru.flushed", extra={"write_backs": count})
        return count

    def keys_lru_order(self) -> List[I]:
        """Resident indices, least recently used first."""
        return [
            self._slots[self._list.slot_of(handle)].index for handle in self._list
        ]

    def reset_stats(self) -> None:
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def weight_sum(self) -> int:
        return self._weight_sum

    @property
    def backend(self) -> CacheBackend[I, V]:
        """The backend object; access to it does not touch cache state."""
        return self._backend

    def get_backend(self) -> CacheBackend[I, V]:
        return self._backend

    def get_backend_mut(self) -> CacheBackend[I, V]:
        return self._backend

    def __len__(self) -> int:
        return len(self._list)

    def __contains__(self, index: object) -> bool:
        return self._map.get(index) is not None  # type: ignore[arg-type]

    def __enter__(self) -> "WriteBackLRU[I, V]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.flush()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(len={len(self)}, "
            f"weight_sum={self._weight_sum}, capacity={self._capacity})"
        )

    # ---------------- Internals ----------------
    def _touch(self, index: I, dirty: bool) -> Optional[Slot[I, V]]:
        handle = self._map.get(index)
        if handle is not None:
            self._list.move_to_tail(handle)
            slot = self._slots[self._list.slot_of(handle)]
            slot.dirty = slot.dirty or dirty
            self._stats.hits += 1
            return slot

        self._stats.misses += 1
        item = self._load(index)
        if item is None:
            return None
        return self._admit(index, item, dirty)

    def _load(self, index: I) -> Optional[V]:
        self._stats.loads += 1
        try:
            item = self._backend.load(index)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._stats.load_failures += 1
            logger.warning(
                "lru.load_failed",
                extra={"index": repr(index), "error": str(exc)},
            )
            return None
        logger.debug(
            "lru.load", extra={"index": repr(index), "found": item is not None}
        )
        return item

    def _weight(self, index: I, item: V) -> int:
        if self._weigh is None:
            return 1
        weight = self._weigh(index, item)
        if weight < 0:
            raise ValueError(f"backend weight for {index!r} is negative: {weight}")
        return weight

    def _admit(self, index: I, item: V, dirty: bool) -> Slot[I, V]:
        weight = self._weight(index, item)
        if weight > self._capacity:
            logger.debug(
                "lru.oversize_item",
                extra={"index": repr(index), "weight": weight},
            )
        while len(self._list) and self._weight_sum + weight > self._capacity:
            self._evict_lru()
        slot = Slot(index, item, dirty, weight)
        handle = self._list.push_tail(self._slots.allocate(slot))
        self._map.insert(index, handle)
        self._weight_sum += weight
        return slot

    def _evict_lru(self) -> None:
        handle = self._list.head
        if handle is not None:
            self._evict(handle)

    def _evict(self, handle: int) -> None:
        slot_id = self._list.slot_of(handle)
        self._list.remove(handle)
        slot = self._slots.free(slot_id)
        self._map.remove(slot.index)
        self._weight_sum -= slot.weight
        self._stats.evictions += 1
        if slot.dirty:
            self._stats.dirty_write_backs += 1
        logger.debug(
            "lru.evict",
            extra={"index": repr(slot.index), "dirty": slot.dirty},
        )
        self._backend.write_back(slot.index, slot.item, slot.dirty)

    # ---------------- Diagnostics ----------------
    def check_invariants(self) -> None:
        """Verify the map, recency list and slot table agree.

        Raises
        ------
        CacheInvariantError
            Describing the first inconsistency found.
        """
        occupied = dict(self._slots.occupied())
        if not len(self._map) == len(occupied) == len(self._list):
            raise CacheInvariantError(
                f"size mismatch: map={len(self._map)} slots={len(occupied)} "
                f"list={len(self._list)}"
            )

        defect = self._list.check_links()
        if defect is not None:
            raise CacheInvariantError(defect)

        listed = [self._list.slot_of(handle) for handle in self._list]
        if len(set(listed)) != len(listed):
            raise CacheInvariantError("recency list references a slot twice")

        mapped = set()
        for key in self._map:
            handle = self._map.get(key)
            if handle is None or not self._list.is_linked(handle):
                raise CacheInvariantError(f"map entry {key!r} has no linked node")
            slot_id = self._list.slot_of(handle)
            slot = occupied.get(slot_id)
            if slot is None:
                raise CacheInvariantError(f"map entry {key!r} points at free slot")
            if slot.index != key:
                raise CacheInvariantError(
                    f"map entry {key!r} points at slot holding {slot.index!r}"
                )
            mapped.add(slot_id)
        if mapped != set(listed):
            raise CacheInvariantError("map and recency list reference other slots")

        free_ids = self._slots.free_ids
        if len(set(free_ids)) != len(free_ids) or set(free_ids) & mapped:
            raise CacheInvariantError("free-slot queue overlaps resident slots")
        if set(free_ids) | mapped != set(range(self._slots.table_size)):
            raise CacheInvariantError("slot ids neither free nor resident")

        total = sum(slot.weight for slot in occupied.values())
        if total != self._weight_sum:
            raise CacheInvariantError(
                f"weight_sum {self._weight_sum} != resident weight {total}"
            )
        if self._weight_sum > self._capacity and len(self._list) > 1:
            raise CacheInvariantError(
                f"weight_sum {self._weight_sum} exceeds capacity {self._capacity}"
            )


class LRUCache(WriteBackLRU[I, V]):
    """Write-back LRU cache for hashable indices."""

    def __init__(
        self, backend: CacheBackend[I, V], capacity: int = DEFAULT_CAPACITY
    ) -> None:
        super().__init__(backend, capacity, HashKeyMap())


class OrderedLRUCache(WriteBackLRU[I, V]):
    """Write-back LRU cache for totally ordered, possibly unhashable indices."""

    def __init__(
        self, backend: CacheBackend[I, V], capacity: int = DEFAULT_CAPACITY
    ) -> None:
        super().__init__(backend, capacity, OrderedKeyMap())
