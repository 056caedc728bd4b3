"""
Transient loading/error/success status for one logical operation.

``error`` and ``message`` clear themselves ``clear_after`` seconds after they
were set. Every set draws a fresh token from a monotonic counter and its
timer only clears the field if that token is still current, so a late timer
never wipes a newer value. ``loading`` is never cleared by a timer.
"""

import asyncio
import itertools
from typing import Dict, Optional

from pydantic import BaseModel

from shared.errors import DEFAULT_ERROR_MESSAGES, ErrorKind
from shared.logging import get_logger


DEFAULT_CLEAR_AFTER = 3.0


class StatusSnapshot(BaseModel):
    """Point-in-time view of a TransientStatus."""

    loading: bool = False
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None


class TransientStatus:
    """Self-clearing status owned by exactly one operation."""

    def __init__(
        self,
        name: str = "operation",
        clear_after: float = DEFAULT_CLEAR_AFTER,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.name = name
        self.clear_after = clear_after
        self.logger = get_logger("lisk.status").bind(operation=name)
        self._loop = loop

        self.loading = False
        self.error: Optional[str] = None
        self.error_kind: Optional[ErrorKind] = None
        self.message: Optional[str] = None

        self._tokens = itertools.count(1)
        self._error_token = 0
        self._message_token = 0
        self._pending: Dict[int, asyncio.TimerHandle] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def pending_timers(self) -> int:
        return len(self._pending)

    def begin(self) -> None:
        """Mark the operation as in flight. Leaves error/message untouched."""
        if self._disposed:
            return
        self.loading = True

    def begin_and_clear(self) -> None:
        """Mark in flight and drop any previous error/message."""
        if self._disposed:
            return
        self.loading = True
        self.error = None
        self.error_kind = None
        self.message = None

    def settle(self) -> None:
        """Finish without reporting anything (e.g. a silent cache hit)."""
        if self._disposed:
            return
        self.loading = False

    def succeed(self, message: str) -> None:
        if self._disposed:
            self.logger.debug("Ignoring success on disposed status", status_message=message)
            return
        token = next(self._tokens)
        self.loading = False
        self.message = message
        self._message_token = token
        self._arm("message", token)

    def fail(self, kind: ErrorKind, detail: Optional[str] = None) -> None:
        if self._disposed:
            self.logger.debug("Ignoring failure on disposed status", error_kind=kind.value)
            return
        token = next(self._tokens)
        self.loading = False
        self.error = detail or DEFAULT_ERROR_MESSAGES[kind]
        self.error_kind = kind
        self._error_token = token
        self._arm("error", token)

    def reset(self) -> None:
        """Return to idle immediately and cancel pending timers."""
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        self.loading = False
        self.error = None
        self.error_kind = None
        self.message = None

    def dispose(self) -> None:
        """Reset and ignore every later transition."""
        self.reset()
        self._disposed = True

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(
            loading=self.loading,
            error=self.error,
            error_kind=self.error_kind,
            message=self.message,
        )

    def _arm(self, field: str, token: int) -> None:
        try:
            loop = self._loop or asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug("No running event loop; auto-clear not scheduled", field=field)
            return
        self._pending[token] = loop.call_later(self.clear_after, self._expire, field, token)

    def _expire(self, field: str, token: int) -> None:
        self._pending.pop(token, None)
        if field == "error" and self._error_token == token:
            self.error = None
            self.error_kind = None
        elif field == "message" and self._message_token == token:
            self.message = None

    def __repr__(self) -> str:
        return (
            f"TransientStatus(name={self.name!r}, loading={self.loading}, "
            f"error={self.error!r}, message={self.message!r})"
        )
