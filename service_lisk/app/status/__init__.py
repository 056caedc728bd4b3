"""
Transient status package: loading/error/success indicators that clear
themselves after a fixed window.
"""

from .transient_status import DEFAULT_CLEAR_AFTER, StatusSnapshot, TransientStatus

__all__ = ["DEFAULT_CLEAR_AFTER", "StatusSnapshot", "TransientStatus"]
