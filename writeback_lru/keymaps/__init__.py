"""Index-to-node maps used by the LRU engine.

Two variants share the :class:`KeyMap` contract:

- :class:`HashKeyMap` for hashable indices (backed by ``dict``).
- :class:`OrderedKeyMap` for totally ordered indices that need not be
  hashable (sorted parallel arrays searched with :mod:`bisect`).

Both store recency-list node handles, not slot ids, so the engine can promote
a node without touching the map.
"""

# pylint: disable=too-few-public-methods

from __future__ import annotations

import bisect
from enum import Enum
from typing import Any, Dict, Generic, Iterator, List, Optional, Protocol, TypeVar

I = TypeVar("I")


class KeyMapKind(str, Enum):
    """Selectable key map variants."""

    HASH = "hash"
    ORDERED = "ordered"


class KeyMap(Protocol[I]):
    """Mapping contract from an index to a recency-node handle."""

    def get(self, key: I) -> Optional[int]:
        """Return the node handle for ``key`` or None."""
        raise NotImplementedError

    def insert(self, key: I, handle: int) -> None:
        """Insert or replace the handle stored for ``key``."""
        raise NotImplementedError

    def remove(self, key: I) -> Optional[int]:
        """Remove ``key`` and return its handle, or None if absent."""
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError

    def __iter__(self) -> Iterator[I]:
        raise NotImplementedError


class HashKeyMap(Generic[I]):
    """Key map for hashable indices."""

    def __init__(self) -> None:
        self._map: Dict[Any, int] = {}

    def get(self, key: I) -> Optional[int]:
        return self._map.get(key)

    def insert(self, key: I, handle: int) -> None:
        self._map[key] = handle

    def remove(self, key: I) -> Optional[int]:
        return self._map.pop(key, None)

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[I]:
        return iter(self._map)


class OrderedKeyMap(Generic[I]):
    """Key map for totally ordered indices.

    Lookups are O(log n) binary searches. Keys are only compared with ``<``
    and ``==``, never hashed, and iterate in ascending order.
    """

    def __init__(self) -> None:
        self._keys: List[Any] = []
        self._handles: List[int] = []

    def _find(self, key: I) -> int:
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return -1

    def get(self, key: I) -> Optional[int]:
        pos = self._find(key)
        return None if pos < 0 else self._handles[pos]

    def insert(self, key: I, handle: int) -> None:
        pos = bisect.bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            self._handles[pos] = handle
            return
        self._keys.insert(pos, key)
        self._handles.insert(pos, handle)

    def remove(self, key: I) -> Optional[int]:
        pos = self._find(key)
        if pos < 0:
            return None
        del self._keys[pos]
        return self._handles.pop(pos)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[I]:
        return iter(list(self._keys))


def create_key_map(kind: KeyMapKind | str = KeyMapKind.HASH) -> KeyMap[Any]:
    """Build an empty key map of the requested variant.

    Raises
    ------
    ValueError
        If ``kind`` does not name a known variant.
    """
    kind = KeyMapKind(kind)
    if kind is KeyMapKind.ORDERED:
        return OrderedKeyMap()
    return HashKeyMap()


__all__ = [
    "HashKeyMap",
    "KeyMap",
    "KeyMapKind",
    "OrderedKeyMap",
    "create_key_map",
]
