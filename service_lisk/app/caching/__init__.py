"""
Caching package.

Provides the ephemeral cache shared by every resource client and the
storage media it can sit on. Expiry is decided at read time; prefer
explicit purges after mutations over waiting for entries to age out.
"""

from .ephemeral_cache import CacheEntry, EphemeralCache, DEFAULT_MAX_AGE, DEFAULT_RETENTION
from .storage import MemoryStorage, RedisStorage, StoragePort

__all__ = [
    "CacheEntry",
    "EphemeralCache",
    "DEFAULT_MAX_AGE",
    "DEFAULT_RETENTION",
    "MemoryStorage",
    "RedisStorage",
    "StoragePort",
]
