"""Backend over any mutable mapping (``dict``, ``shelve`` shelves, ...)."""

from __future__ import annotations

import logging
from typing import Callable, MutableMapping, Optional, TypeVar

from . import CacheBackend

logger = logging.getLogger(__name__)

I = TypeVar("I")
V = TypeVar("V")


class MappingBackend(CacheBackend[I, V]):
    """Persist dirty write-backs into a ``MutableMapping``.

    Parameters
    ----------
    store: MutableMapping
        The authoritative storage. Defaults to a fresh ``dict``.
    weigher: Callable[[I, V], int], optional
        Weight function; defaults to one unit per item.
    """

    def __init__(
        self,
        store: Optional[MutableMapping[I, V]] = None,
        weigher: Optional[Callable[[I, V], int]] = None,
    ) -> None:
        self.store: MutableMapping[I, V] = {} if store is None else store
        self._weigher = weigher
        self.writes = 0

    def load(self, index: I) -> Optional[V]:
        return self.store.get(index)

    def write_back(self, index: I, item: V, dirty: bool) -> None:
        if not dirty:
            return
        self.store[index] = item
        self.writes += 1
        logger.debug("mapping_backend.stored", extra={"index": repr(index)})

    def weight(self, index: I, item: V) -> int:
        if self._weigher is None:
            return 1
        return self._weigher(index, item)
