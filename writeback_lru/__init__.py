"""
Write-back LRU cache library.

The cache sits in front of a user-supplied backend, loads missing items on
demand, keeps a weight-bounded working set ordered by recency of use, and
writes evicted items back with a flag telling whether they changed.
"""

from .__version__ import __version__
from .backends import CacheBackend
from .backends.mapping import MappingBackend
from .cache import (
    CacheInvariantError,
    CacheStats,
    LRUCache,
    OrderedLRUCache,
    WriteBackLRU,
)
from .keymaps import HashKeyMap, KeyMap, KeyMapKind, OrderedKeyMap, create_key_map

__all__ = [
    "__version__",
    "CacheBackend",
    "CacheInvariantError",
    "CacheStats",
    "HashKeyMap",
    "KeyMap",
    "KeyMapKind",
    "LRUCache",
    "MappingBackend",
    "OrderedKeyMap",
    "OrderedLRUCache",
    "WriteBackLRU",
    "create_key_map",
]
