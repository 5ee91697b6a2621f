"""Runtime helpers for the keybase"""

from .errors import ErrorCode, KeybaseError, KeybaseResult

__all__ = [
    "ErrorCode",
    "KeybaseError",
    "KeybaseResult",
]
