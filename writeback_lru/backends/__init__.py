"""Backing-store interface for the write-back cache."""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

I = TypeVar("I")
V = TypeVar("V")


class CacheBackend(Protocol[I, V]):
    """Protocol for the storage a cache writes back to.

    Implementations wrap the authoritative store (a file, a blob store, a
    database). Subclass this protocol explicitly to inherit the default
    unit :meth:`weight`; structural implementations without ``weight`` are
    also treated as weighing 1 per item.
    """

    def load(self, index: I) -> Optional[V]:
        """Return the authoritative item for ``index``, or None if absent.

        Exceptions raised here are treated by the cache as absence.
        """
        raise NotImplementedError

    def write_back(self, index: I, item: V, dirty: bool) -> None:
        """Receive an evicted item.

        ``dirty`` is True iff the item was inserted or handed out for
        mutation while cached. Clean write-backs may be ignored.
        """
        raise NotImplementedError

    def weight(self, index: I, item: V) -> int:
        """Return the nonnegative capacity cost of ``item``. Defaults to 1."""
        return 1


__all__ = ["CacheBackend"]
