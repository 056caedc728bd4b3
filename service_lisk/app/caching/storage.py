"""
Storage media backing the ephemeral cache.

A medium only stores strings under keys with its own lifetime. Freshness of
cache entries is decided by the cache at read time, never by the medium.
"""

import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis

from shared.logging import get_logger


class StoragePort(ABC):
    """Key/value medium used by EphemeralCache."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the raw string at key, or None if absent."""

    @abstractmethod
    def write(self, key: str, value: str, ttl: float) -> None:
        """Store value under key for at least ttl seconds."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key; no-op when absent."""

    @abstractmethod
    def wipe_all(self) -> None:
        """Remove every key the medium holds, not only cache-managed ones."""


class MemoryStorage(StoragePort):
    """Process-local medium. Expired medium entries read as absent."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._items: Dict[str, Tuple[str, float]] = {}

    def read(self, key: str) -> Optional[str]:
        item = self._items.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock() >= expires_at:
            del self._items[key]
            return None
        return value

    def write(self, key: str, value: str, ttl: float) -> None:
        self._items[key] = (value, self._clock() + ttl)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def wipe_all(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return self.read(key) is not None


class RedisStorage(StoragePort):
    """Redis medium using the synchronous client so cache calls never suspend.

    ``wipe_all`` issues FLUSHDB: it removes everything in the selected
    database, including keys written by other applications.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379/0", client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("lisk.cache.redis")
        self._redis: Optional[redis.Redis] = client

    def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.Redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self._redis

    def read(self, key: str) -> Optional[str]:
        raw = self._get_redis().get(key)
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    def write(self, key: str, value: str, ttl: float) -> None:
        self._get_redis().set(key, value, px=max(1, math.ceil(ttl * 1000)))

    def remove(self, key: str) -> None:
        self._get_redis().delete(key)

    def wipe_all(self) -> None:
        self.logger.warning("Flushing entire Redis database", redis_url=self.redis_url)
        self._get_redis().flushdb()

    def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            self._redis.close()
            self._redis = None
