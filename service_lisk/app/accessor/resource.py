"""
Base class for cached resource clients.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger
from ..caching import EphemeralCache
from ..status import DEFAULT_CLEAR_AFTER, StatusSnapshot
from .operations import Operation, ReadThrough, WriteThenInvalidate

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class ResourceAccessor:
    """Owns the operations of one resource and their shared collaborators.

    The cache is shared with every other accessor; statuses are private to
    each operation. ``close`` bumps the generation so completions still in
    flight are dropped instead of touching state.
    """

    name = "resource"

    def __init__(
        self,
        cache: EphemeralCache,
        *,
        credential: Optional[str] = None,
        require_credential: bool = True,
        max_age: Optional[float] = None,
        clear_after: float = DEFAULT_CLEAR_AFTER,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.credential = credential
        self.require_credential = require_credential
        self.max_age = max_age
        self.clear_after = clear_after
        self.metrics = metrics
        self.logger = get_logger(f"lisk.{self.name}")

        self._operations: Dict[str, Operation] = {}
        self._generation = 0
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def reader(self, name: str, **kwargs: Any) -> ReadThrough:
        """Create and register a read-through operation."""
        return self._register(ReadThrough(self, name, **kwargs))

    def writer(self, name: str, **kwargs: Any) -> WriteThenInvalidate:
        """Create and register a write-then-invalidate operation."""
        return self._register(WriteThenInvalidate(self, name, **kwargs))

    def _register(self, operation):
        if operation.name in self._operations:
            raise ValueError(f"Duplicate operation name: {operation.name}")
        self._operations[operation.name] = operation
        return operation

    def operation(self, name: str) -> Operation:
        return self._operations[name]

    def statuses(self) -> Dict[str, StatusSnapshot]:
        """Snapshot of every operation's status, keyed by operation name."""
        return {name: op.status.snapshot() for name, op in self._operations.items()}

    def close(self) -> None:
        """Tear down: cancel status timers and drop in-flight completions."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        for operation in self._operations.values():
            operation.status.dispose()
        self.logger.debug("Resource accessor closed", operations=len(self._operations))
