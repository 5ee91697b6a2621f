"""
Address derivation and structural key checks.

An address is the first 20 bytes of the SHA-256 digest of the public key,
written as 40 lowercase hex characters.
"""

from __future__ import annotations
import hashlib
import string
from typing import Optional

from ..crypto.ed25519 import (
    Ed25519Error,
    Ed25519PrivateKey,
    PRIVATE_KEY_LENGTH,
    PUBLIC_KEY_LENGTH,
    SEED_LENGTH,
)
from ..runtime.errors import InvalidAddressError, InvalidPrivateKeyError, InvalidPublicKeyError

ADDRESS_LENGTH = 20
ADDRESS_HEX_LENGTH = ADDRESS_LENGTH * 2

_HEX_DIGITS = frozenset(string.hexdigits)


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive the hex address of a public key.

    Raises:
        InvalidPublicKeyError: If the key is not 32 bytes
    """
    if not validate_public_key(public_key):
        raise InvalidPublicKeyError(details={"length": _length(public_key)})
    return hashlib.sha256(public_key).digest()[:ADDRESS_LENGTH].hex()


def public_key_from_private_key(private_key: bytes) -> bytes:
    """
    Read the public key out of a 64-byte private key.

    Raises:
        InvalidPrivateKeyError: If the key is not 64 bytes
    """
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != PRIVATE_KEY_LENGTH:
        raise InvalidPrivateKeyError(details={"length": _length(private_key)})
    return bytes(private_key[SEED_LENGTH:])


def validate_public_key(public_key: bytes) -> bool:
    return isinstance(public_key, (bytes, bytearray)) and len(public_key) == PUBLIC_KEY_LENGTH


def validate_private_key(private_key: bytes) -> bool:
    """
    Check that ``private_key`` is a well formed 64-byte Ed25519 private key
    whose public half matches the key derived from its seed half.
    """
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != PRIVATE_KEY_LENGTH:
        return False
    try:
        Ed25519PrivateKey(bytes(private_key))
    except Ed25519Error:
        return False
    return True


def validate_address_hex(address_hex: str) -> Optional[InvalidAddressError]:
    """
    Validate an address in hex format.

    Returns:
        None if the address is valid, otherwise the error describing why not
    """
    if not isinstance(address_hex, str):
        return InvalidAddressError("Address must be a hex string")
    if len(address_hex) != ADDRESS_HEX_LENGTH:
        return InvalidAddressError(
            f"Address must be {ADDRESS_HEX_LENGTH} hex characters, got {len(address_hex)}"
        )
    if not all(c in _HEX_DIGITS for c in address_hex):
        return InvalidAddressError("Address contains non hex characters")
    return None


def _length(value) -> Optional[int]:
    try:
        return len(value)
    except TypeError:
        return None
