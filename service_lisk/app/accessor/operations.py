"""
Read-through and write-then-invalidate operations.

Each operation owns one TransientStatus and mirrors its outcome into plain
attributes (``data``/``result``, ``loading``, ``error``, ``message``).
Remote failures are caught here and turned into status; they never
propagate to the caller. Completions that land after the owning accessor
was closed are discarded.
"""

import time
from typing import (
    Any, Awaitable, Callable, Dict, Generic, Iterable, Optional, TypeVar, Union, TYPE_CHECKING
)

from shared.errors import (
    DEFAULT_ERROR_MESSAGES,
    ErrorKind,
    ErrorResponse,
    LiskAccessException,
    MissingCredentialError,
    classify_exception,
)
from ..status import TransientStatus

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .resource import ResourceAccessor


T = TypeVar("T")
R = TypeVar("R")

MessageSpec = Union[str, Callable[[Any], str]]
KeySpec = Union[Iterable[str], Callable[[Any], Iterable[str]]]

_MISSING = object()

BASE_ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNAUTHORIZED: DEFAULT_ERROR_MESSAGES[ErrorKind.UNAUTHORIZED],
    ErrorKind.MISSING_CREDENTIAL: DEFAULT_ERROR_MESSAGES[ErrorKind.MISSING_CREDENTIAL],
}


def message_from_response(default: str) -> Callable[[Any], str]:
    """Use the ``message`` field of a response dict when present."""
    def _pick(result: Any) -> str:
        if isinstance(result, dict) and result.get("message"):
            return str(result["message"])
        return default
    return _pick


def _render(spec: MessageSpec, value: Any) -> str:
    return spec(value) if callable(spec) else spec


class Operation:
    """Shared plumbing for a single named operation of a resource."""

    def __init__(
        self,
        owner: "ResourceAccessor",
        name: str,
        *,
        error_messages: Optional[Dict[ErrorKind, str]] = None,
        failure_message: Optional[str] = None,
        prefer_remote_message: bool = False,
    ):
        self.owner = owner
        self.name = name
        self.status = TransientStatus(name, clear_after=owner.clear_after)
        self.error_messages = {**BASE_ERROR_MESSAGES, **(error_messages or {})}
        self.failure_message = failure_message
        self.prefer_remote_message = prefer_remote_message
        self.last_error: Optional[ErrorResponse] = None
        self.logger = owner.logger.bind(operation=name)

    @property
    def loading(self) -> bool:
        return self.status.loading

    @property
    def error(self) -> Optional[str]:
        return self.status.error

    @property
    def message(self) -> Optional[str]:
        return self.status.message

    def reject(self, kind: ErrorKind, message: Optional[str] = None) -> None:
        """Fail locally without contacting the remote service."""
        detail = message or self.error_messages.get(kind) or DEFAULT_ERROR_MESSAGES[kind]
        self.last_error = ErrorResponse(code=kind.value, message=detail)
        self.status.fail(kind, detail)
        self.logger.info("Operation rejected", error_kind=kind.value, reason=detail)
        self._record("rejected", None)

    def _error_message(self, kind: ErrorKind, exc: BaseException) -> str:
        if kind in self.error_messages:
            return self.error_messages[kind]
        remote = getattr(exc, "remote_message", None)
        if self.prefer_remote_message and remote:
            return remote
        return self.failure_message or DEFAULT_ERROR_MESSAGES[kind]

    def _report_failure(self, exc: Exception, started: float) -> None:
        kind = classify_exception(exc)
        if isinstance(exc, LiskAccessException):
            self.last_error = exc.to_response()
        else:
            self.last_error = ErrorResponse(code=kind.value, message=str(exc))
        self.logger.warning("Remote operation failed", error_kind=kind.value, error=str(exc))
        self.status.fail(kind, self._error_message(kind, exc))
        self._record("error", started)

    def _has_credential(self) -> bool:
        """Gate before any remote call."""
        if self.owner.require_credential and not self.owner.credential:
            self.reject(ErrorKind.MISSING_CREDENTIAL)
            self.last_error = MissingCredentialError(details={"resource": self.owner.name}).to_response()
            return False
        return True

    def _is_current(self, generation: int) -> bool:
        if generation != self.owner.generation:
            self.logger.debug("Discarding completion after teardown")
            return False
        return True

    def _record(self, outcome: str, started: Optional[float]) -> None:
        metrics = self.owner.metrics
        if metrics is None:
            return
        duration = 0.0 if started is None else time.monotonic() - started
        metrics.record_operation(f"{self.owner.name}.{self.name}", outcome, duration)


class ReadThrough(Operation, Generic[T]):
    """Cache-first read that falls back to a remote loader on miss."""

    def __init__(
        self,
        owner: "ResourceAccessor",
        name: str,
        *,
        default: Any = None,
        success_message: MessageSpec = "Fetched successfully.",
        hit_message: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(owner, name, **kwargs)
        self.default = default
        self.data: Any = default
        self.success_message = success_message
        self.hit_message = hit_message

    async def fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        *,
        max_age: Optional[float] = None,
        success_message: Optional[MessageSpec] = None,
        hit_message: Optional[str] = None,
    ) -> T:
        """Return the cached value for key, or load, store and return it.

        On failure the cache is untouched, ``data`` keeps its previous
        value and ``default`` is returned.
        """
        if self.owner.closed:
            return self.default

        started = time.monotonic()
        max_age = self.owner.max_age if max_age is None else max_age
        self.status.begin_and_clear()

        cached = self.owner.cache.get(key, default=_MISSING, max_age=max_age)
        if cached is not _MISSING:
            self.data = cached
            hit = hit_message or self.hit_message
            if hit:
                self.status.succeed(hit)
            else:
                self.status.settle()
            self._record("hit", started)
            return cached

        if not self._has_credential():
            return self.default

        generation = self.owner.generation
        try:
            value = await loader()
        except Exception as exc:
            if self._is_current(generation):
                self._report_failure(exc, started)
            return self.default

        if not self._is_current(generation):
            return value

        self.data = value
        self.status.succeed(_render(success_message or self.success_message, value))
        if not self.owner.cache.set(key, value, max_age):
            self.status.fail(ErrorKind.CACHE_WRITE)
        self._record("ok", started)
        return value


class WriteThenInvalidate(Operation, Generic[R]):
    """Remote mutation followed by cache invalidation and optional refetch."""

    def __init__(
        self,
        owner: "ResourceAccessor",
        name: str,
        *,
        success_message: MessageSpec = "Completed successfully.",
        **kwargs: Any,
    ):
        super().__init__(owner, name, **kwargs)
        self.result: Optional[R] = None
        self.success_message = success_message

    async def mutate(
        self,
        call: Callable[[], Awaitable[R]],
        *,
        invalidates: KeySpec = (),
        refetch: Optional[Callable[[], Awaitable[Any]]] = None,
        success_message: Optional[MessageSpec] = None,
        on_success: Optional[Callable[[R], None]] = None,
    ) -> Optional[R]:
        """Run call; on success purge invalidated keys, report, then refetch.

        Returns None on failure. A failed remote call invalidates nothing; a
        failing invalidation or on_success step is reported the same way even
        though the remote mutation was already applied.
        """
        if self.owner.closed:
            return None

        started = time.monotonic()
        self.status.begin_and_clear()
        if not self._has_credential():
            return None

        generation = self.owner.generation
        try:
            result = await call()
        except Exception as exc:
            if self._is_current(generation):
                self._report_failure(exc, started)
            return None

        if not self._is_current(generation):
            return result

        try:
            keys = invalidates(result) if callable(invalidates) else invalidates
            for key in keys:
                self.owner.cache.purge(key)
            if on_success is not None:
                on_success(result)
            message = _render(success_message or self.success_message, result)
        except Exception as exc:
            # The remote side already applied the mutation
            self.logger.error("Post-mutation step failed", error=str(exc))
            self._report_failure(exc, started)
            return None

        self.result = result
        self.status.succeed(message)
        self._record("ok", started)

        if refetch is not None:
            try:
                await refetch()
            except Exception as exc:
                if self._is_current(generation):
                    self._report_failure(exc, started)
        return result
