"""
Shared error handling for the Lisk access layer.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Classification of failures surfaced through status controllers."""

    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    REMOTE_FAILURE = "REMOTE_FAILURE"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    CACHE_WRITE = "CACHE_WRITE_ERROR"
    CACHE_CLEAR = "CACHE_CLEAR_ERROR"


DEFAULT_ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNAUTHORIZED: "Unauthorized.",
    ErrorKind.VALIDATION: "Validation error.",
    ErrorKind.NOT_FOUND: "Not found.",
    ErrorKind.REMOTE_FAILURE: "Request failed.",
    ErrorKind.MISSING_CREDENTIAL: "API key is missing.",
    ErrorKind.CACHE_WRITE: "Failed to write cache.",
    ErrorKind.CACHE_CLEAR: "Failed to clear cache.",
}


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class LiskAccessException(Exception):
    """Base exception for the Lisk access layer."""

    kind = ErrorKind.REMOTE_FAILURE

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class CacheWriteError(LiskAccessException):
    """Serialization or storage failure while writing a cache entry."""

    kind = ErrorKind.CACHE_WRITE

    def __init__(self, message: str = "Cache write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.CACHE_WRITE.value, message, details)


class MissingCredentialError(LiskAccessException):
    """Raised when an operation needs a credential that was not supplied."""

    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, message: str = "API key is missing", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.MISSING_CREDENTIAL.value, message, details)


class RemoteServiceError(LiskAccessException):
    """Remote operation failed; status_code is None for transport errors."""

    kind = ErrorKind.REMOTE_FAILURE

    def __init__(
        self,
        message: str = "Remote service error",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(self.kind.value, message, details)

    @property
    def remote_message(self) -> Optional[str]:
        """Message supplied by the remote service, if any."""
        return self.details.get("remote_message")


class UnauthorizedError(RemoteServiceError):
    """401 from the remote service."""

    kind = ErrorKind.UNAUTHORIZED


class ValidationError(RemoteServiceError):
    """400 from the remote service."""

    kind = ErrorKind.VALIDATION


class NotFoundError(RemoteServiceError):
    """404 from the remote service."""

    kind = ErrorKind.NOT_FOUND


_STATUS_ERRORS = {
    400: ValidationError,
    401: UnauthorizedError,
    404: NotFoundError,
}


def remote_error_for_status(
    status_code: int,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> RemoteServiceError:
    """Build the RemoteServiceError subclass matching an HTTP status code."""
    error_cls = _STATUS_ERRORS.get(status_code, RemoteServiceError)
    details = dict(details or {})
    if message:
        details["remote_message"] = message
    return error_cls(
        message or f"Remote service returned {status_code}",
        status_code=status_code,
        details=details,
    )


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map any exception raised by a remote operation to an ErrorKind."""
    if isinstance(exc, LiskAccessException):
        return exc.kind
    return ErrorKind.REMOTE_FAILURE
