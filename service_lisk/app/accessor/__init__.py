"""
Cached resource accessor: the read-through / write-then-invalidate protocol
every resource client follows.
"""

from .operations import (
    BASE_ERROR_MESSAGES,
    Operation,
    ReadThrough,
    WriteThenInvalidate,
    message_from_response,
)
from .resource import ResourceAccessor

__all__ = [
    "BASE_ERROR_MESSAGES",
    "Operation",
    "ReadThrough",
    "WriteThenInvalidate",
    "ResourceAccessor",
    "message_from_response",
]
