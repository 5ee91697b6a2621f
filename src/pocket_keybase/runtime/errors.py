"""
Keybase Error Model

This module provides the error handling framework for the keybase: a set of
error codes, the exception hierarchy rooted at ``KeybaseError`` and the
``KeybaseResult`` value returned by every public keybase operation.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(IntEnum):
    """Keybase error codes."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    INVALID_ARGUMENT = 3

    # Passphrase errors (100-199)
    EMPTY_PASSPHRASE = 100
    WRONG_PASSPHRASE = 101

    # Key/Account errors (200-299)
    INVALID_PRIVATE_KEY = 200
    INVALID_PUBLIC_KEY = 201
    INVALID_ADDRESS = 202
    ACCOUNT_NOT_FOUND = 203

    # Unlock state errors (300-399)
    NOT_UNLOCKED = 300

    # Storage errors (400-499)
    STORE_ERROR = 400
    INDEX_CORRUPT = 401


class KeybaseError(Exception):
    """
    Base class for all keybase errors.

    Provides structured error information: a code, a message, optional
    details and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a keybase error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeybaseError":
        """Create the matching error type from its dictionary representation."""
        try:
            code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
        except ValueError:
            code = ErrorCode.UNKNOWN
        message = data.get("message", "Unknown error")
        details = data.get("details")

        error_type = _ERRORS_BY_CODE.get(code)
        if error_type is None:
            return KeybaseError(message, code, details)
        return error_type(message, details=details)


class EmptyPassphraseError(KeybaseError):
    """Passphrase has zero length."""

    def __init__(self, message: str = "Empty passphrase",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.EMPTY_PASSPHRASE, details, cause)


class WrongPassphraseError(KeybaseError):
    """Passphrase does not decrypt the account it was given for."""

    def __init__(self, message: str = "Wrong passphrase for account",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.WRONG_PASSPHRASE, details, cause)


class InvalidPrivateKeyError(KeybaseError):
    """Private key failed the structural check."""

    def __init__(self, message: str = "Invalid private key",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_PRIVATE_KEY, details, cause)


class InvalidPublicKeyError(KeybaseError):
    """Public key failed the structural check."""

    def __init__(self, message: str = "Invalid public key",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_PUBLIC_KEY, details, cause)


class InvalidAddressError(KeybaseError):
    """Address is not a well formed hex address."""

    def __init__(self, message: str = "Invalid address hex",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_ADDRESS, details, cause)


class AccountNotFoundError(KeybaseError):
    """No account record stored at the address."""

    def __init__(self, message: str = "Account not found",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.ACCOUNT_NOT_FOUND, details, cause)


class NotUnlockedError(KeybaseError):
    """Account is not present in the unlocked table."""

    def __init__(self, message: str = "Account is not unlocked",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NOT_UNLOCKED, details, cause)


class StoreError(KeybaseError):
    """The key-value store failed an operation."""

    def __init__(self, message: str = "Store operation failed",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.STORE_ERROR, details, cause)


class IndexCorruptError(StoreError):
    """Account index and account records disagree."""

    def __init__(self, message: str = "Account index is corrupt",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        KeybaseError.__init__(self, message, ErrorCode.INDEX_CORRUPT, details, cause)


class InvalidArgumentError(KeybaseError):
    """An argument is outside its accepted range."""

    def __init__(self, message: str = "Invalid argument",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_ARGUMENT, details, cause)


_ERRORS_BY_CODE = {
    ErrorCode.EMPTY_PASSPHRASE: EmptyPassphraseError,
    ErrorCode.WRONG_PASSPHRASE: WrongPassphraseError,
    ErrorCode.INVALID_PRIVATE_KEY: InvalidPrivateKeyError,
    ErrorCode.INVALID_PUBLIC_KEY: InvalidPublicKeyError,
    ErrorCode.INVALID_ADDRESS: InvalidAddressError,
    ErrorCode.ACCOUNT_NOT_FOUND: AccountNotFoundError,
    ErrorCode.NOT_UNLOCKED: NotUnlockedError,
    ErrorCode.STORE_ERROR: StoreError,
    ErrorCode.INDEX_CORRUPT: IndexCorruptError,
    ErrorCode.INVALID_ARGUMENT: InvalidArgumentError,
}


@dataclass(frozen=True)
class KeybaseResult(Generic[T]):
    """
    Outcome of a keybase operation.

    Either ``value`` is set and ``error`` is None, or ``error`` holds the
    ``KeybaseError`` describing the failure. Callers branch on ``success``
    (or truthiness) and may call ``unwrap()`` to get exception semantics.
    """
    success: bool
    value: Optional[T] = None
    error: Optional[KeybaseError] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "KeybaseResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: KeybaseError) -> "KeybaseResult[T]":
        return cls(success=False, error=error)

    @property
    def code(self) -> ErrorCode:
        """Error code of the result, ``ErrorCode.OK`` on success."""
        return self.error.code if self.error is not None else ErrorCode.OK

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.success


__all__ = [
    "ErrorCode",
    "KeybaseError",
    "EmptyPassphraseError",
    "WrongPassphraseError",
    "InvalidPrivateKeyError",
    "InvalidPublicKeyError",
    "InvalidAddressError",
    "AccountNotFoundError",
    "NotUnlockedError",
    "StoreError",
    "IndexCorruptError",
    "InvalidArgumentError",
    "KeybaseResult",
]
