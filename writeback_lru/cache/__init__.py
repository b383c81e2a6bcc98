"""LRU engine and its ready-made variants."""

from .lru import (
    DEFAULT_CAPACITY,
    CacheInvariantError,
    CacheStats,
    LRUCache,
    OrderedLRUCache,
    WriteBackLRU,
)

__all__ = [
    "DEFAULT_CAPACITY",
    "CacheInvariantError",
    "CacheStats",
    "LRUCache",
    "OrderedLRUCache",
    "WriteBackLRU",
]
