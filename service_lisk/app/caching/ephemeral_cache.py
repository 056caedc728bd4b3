"""
Time-bounded key/value cache over a pluggable storage medium.

Entries are stored as the JSON envelope ``{"value": <T>, "ts": <epoch millis>}``.
Expiry is evaluated lazily when reading: a stale entry stays in the medium
until it is overwritten, purged or the store is cleared, it is only hidden
from ``get``. Anything at a key that is not a valid envelope reads as a miss.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TYPE_CHECKING

from shared.errors import CacheWriteError
from shared.logging import get_logger
from .storage import StoragePort

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_MAX_AGE = 60.0
DEFAULT_RETENTION = 86400.0

_ENVELOPE_KEYS = {"value", "ts"}


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the epoch-millis timestamp it was written at."""

    value: Any
    written_at: int

    def age(self, now_ms: int) -> int:
        return now_ms - self.written_at

    def is_fresh(self, max_age: float, now_ms: int) -> bool:
        return self.age(now_ms) < max_age * 1000

    def to_json(self) -> str:
        return json.dumps({"value": self.value, "ts": self.written_at}, allow_nan=False)

    @classmethod
    def from_json(cls, raw: str) -> Optional["CacheEntry"]:
        """Parse an envelope; any other shape returns None."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict) or set(data) != _ENVELOPE_KEYS:
            return None
        ts = data["ts"]
        if isinstance(ts, bool) or not isinstance(ts, int):
            return None
        return cls(value=data["value"], written_at=ts)


class EphemeralCache:
    """Shared, last-writer-wins cache with read-time expiry.

    ``clear`` wipes the primary medium and every extra partition entirely,
    which also removes unrelated data other code stored in the same media.
    """

    def __init__(
        self,
        storage: StoragePort,
        max_age: float = DEFAULT_MAX_AGE,
        *,
        retention: float = DEFAULT_RETENTION,
        partitions: Sequence[StoragePort] = (),
        clock: Callable[[], float] = time.time,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.storage = storage
        self.max_age = max_age
        self.retention = retention
        self.partitions = list(partitions)
        self.metrics = metrics
        self._clock = clock
        self.logger = get_logger("lisk.cache")

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _record_lookup(self, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(result)

    def _record_write(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_cache_write(outcome)

    def set(self, key: str, value: Any, max_age: Optional[float] = None) -> bool:
        """Store value under key. Returns False instead of raising on failure."""
        try:
            self.set_strict(key, value, max_age)
        except CacheWriteError as exc:
            self.logger.error(
                "Cache write failed", key=key, error=exc.message, reason=exc.details.get("reason")
            )
            return False
        return True

    def set_strict(self, key: str, value: Any, max_age: Optional[float] = None) -> None:
        """Store value under key, raising CacheWriteError on failure."""
        max_age = self.max_age if max_age is None else max_age
        entry = CacheEntry(value=value, written_at=self._now_ms())

        try:
            payload = entry.to_json()
        except (TypeError, ValueError) as exc:
            self._record_write("serialization_error")
            raise CacheWriteError(
                "Value is not JSON-serializable",
                details={"key": key, "reason": str(exc)}
            ) from exc

        try:
            self.storage.write(key, payload, max(max_age, self.retention))
        except Exception as exc:
            self._record_write("storage_error")
            raise CacheWriteError(
                "Storage write failed",
                details={"key": key, "reason": str(exc)}
            ) from exc

        self._record_write("ok")
        self.logger.debug("Cached value", key=key, max_age=max_age)

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.read(key)
        except Exception as exc:
            self.logger.error("Cache read failed", key=key, error=str(exc))
            return None

    def get(self, key: str, default: Any = None, max_age: Optional[float] = None) -> Any:
        """Return the fresh value at key, or default on miss, expiry or corruption."""
        max_age = self.max_age if max_age is None else max_age
        raw = self._read(key)
        if raw is None:
            self._record_lookup("miss")
            return default
        entry = CacheEntry.from_json(raw)
        if entry is None:
            self._record_lookup("corrupt")
            self.logger.warning("Ignoring malformed cache entry", key=key)
            return default
        if not entry.is_fresh(max_age, self._now_ms()):
            self._record_lookup("expired")
            self.logger.debug("Cache entry expired", key=key)
            return default
        self._record_lookup("hit")
        self.logger.debug("Cache hit", key=key)
        return entry.value

    def inspect(self, key: str) -> Optional[CacheEntry]:
        """Return the stored entry even if stale; None if absent or malformed."""
        raw = self._read(key)
        return None if raw is None else CacheEntry.from_json(raw)

    def purge(self, key: str) -> bool:
        """Remove exactly the entry at key."""
        try:
            self.storage.remove(key)
        except Exception as exc:
            self.logger.error("Cache purge failed", key=key, error=str(exc))
            return False
        self.logger.debug("Purged cache entry", key=key)
        return True

    def clear(self) -> bool:
        """Wipe every medium this cache uses. Returns False if any wipe failed."""
        ok = True
        for medium in [self.storage] + self.partitions:
            try:
                medium.wipe_all()
            except Exception as exc:
                ok = False
                self.logger.error(
                    "Failed to clear cache partition",
                    partition=type(medium).__name__,
                    error=str(exc)
                )
        if ok:
            self.logger.info("Cache cleared", partitions=1 + len(self.partitions))
        return ok
