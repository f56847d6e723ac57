"""Time-boxed client-side cache.

Public API
----------
TimeBoxedCache
    Typed cache that deletes expired entries on read.
CacheEntry
    Stored wrapper holding payload, fetch time and expiry.
CacheBackend
    Protocol for byte storage backends.
MemoryCacheBackend, FileCacheBackend
    In-process and on-disk backends.
CacheConfig
    Cache directory configuration.
"""

from __future__ import annotations

from .backends import CacheBackend, FileCacheBackend, MemoryCacheBackend
from .config import ORGANIZATIONS_CACHE_KEY, ORGANIZATIONS_TTL, CacheConfig
from .store import CacheEntry, TimeBoxedCache

__all__ = [
    "ORGANIZATIONS_CACHE_KEY",
    "ORGANIZATIONS_TTL",
    "CacheBackend",
    "CacheConfig",
    "CacheEntry",
    "FileCacheBackend",
    "MemoryCacheBackend",
    "TimeBoxedCache",
]
