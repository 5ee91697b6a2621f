r"""
Ed25519 cryptographic operations for the keybase.

Provides Ed25519 key generation, signing, and verification. Private keys use
the 64-byte layout ``seed(32) || public_key(32)`` so the public key can always
be read back from the second half of a decrypted private key.
"""

from __future__ import annotations
import os
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey as CryptoEd25519PrivateKey,
    Ed25519PublicKey as CryptoEd25519PublicKey
)

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
PRIVATE_KEY_LENGTH = SEED_LENGTH + PUBLIC_KEY_LENGTH
SIGNATURE_LENGTH = 64


class Ed25519Error(Exception):
    """Base exception for Ed25519 operations."""
    pass


class Ed25519PublicKey:
    """
    Ed25519 public key.

    Provides verification operations and serialization.
    """

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize from 32-byte public key.

        Args:
            public_key_bytes: 32-byte Ed25519 public key

        Raises:
            Ed25519Error: If key is invalid
        """
        if len(public_key_bytes) != PUBLIC_KEY_LENGTH:
            raise Ed25519Error(f"Ed25519 public key must be 32 bytes, got {len(public_key_bytes)}")

        self._key_bytes = bytes(public_key_bytes)
        try:
            self._crypto_key = CryptoEd25519PublicKey.from_public_bytes(self._key_bytes)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 public key: {e}")

    @classmethod
    def from_hex(cls, hex_string: str) -> Ed25519PublicKey:
        """Create public key from hex string."""
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Ed25519Error(f"Invalid hex string: {e}")
        return cls(key_bytes)

    def to_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self._key_bytes

    def to_hex(self) -> str:
        """Get the public key as hex string."""
        return self._key_bytes.hex()

    def verify(self, signature: bytes, message: bytes) -> bool:
        """
        Verify a signature against a message.

        Args:
            signature: 64-byte Ed25519 signature
            message: Message that was signed

        Returns:
            True if signature is valid
        """
        if len(signature) != SIGNATURE_LENGTH:
            return False

        try:
            self._crypto_key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ed25519PublicKey):
            return False
        return self._key_bytes == other._key_bytes

    def __repr__(self) -> str:
        return f"Ed25519PublicKey.from_hex('{self.to_hex()}')"


class Ed25519PrivateKey:
    """
    Ed25519 private key.

    Accepts either the bare 32-byte seed or the 64-byte ``seed || public_key``
    form; ``to_bytes()`` always returns the 64-byte form.
    """

    def __init__(self, private_key_bytes: bytes):
        """
        Initialize from a 32-byte seed or a 64-byte private key.

        Args:
            private_key_bytes: Ed25519 seed or seed followed by its public key

        Raises:
            Ed25519Error: If key is invalid
        """
        if len(private_key_bytes) not in (SEED_LENGTH, PRIVATE_KEY_LENGTH):
            raise Ed25519Error(
                f"Ed25519 private key must be 32 or 64 bytes, got {len(private_key_bytes)}"
            )

        seed = bytes(private_key_bytes[:SEED_LENGTH])
        try:
            self._crypto_key = CryptoEd25519PrivateKey.from_private_bytes(seed)
        except ValueError as e:
            raise Ed25519Error(f"Invalid Ed25519 private key: {e}")

        self._seed = seed
        self._public_key = Ed25519PublicKey(
            self._crypto_key.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw
            )
        )

        if len(private_key_bytes) == PRIVATE_KEY_LENGTH:
            if bytes(private_key_bytes[SEED_LENGTH:]) != self._public_key.to_bytes():
                raise Ed25519Error("Public half of the private key does not match its seed")

    @classmethod
    def generate(cls) -> Ed25519PrivateKey:
        """Generate a new random Ed25519 private key."""
        return cls(os.urandom(SEED_LENGTH))

    @classmethod
    def from_hex(cls, hex_string: str) -> Ed25519PrivateKey:
        """Create private key from hex string."""
        try:
            key_bytes = bytes.fromhex(hex_string)
        except ValueError as e:
            raise Ed25519Error(f"Invalid hex string: {e}")
        return cls(key_bytes)

    @property
    def seed(self) -> bytes:
        """The 32-byte seed."""
        return self._seed

    def to_bytes(self) -> bytes:
        """Get the 64-byte private key (seed followed by public key)."""
        return self._seed + self._public_key.to_bytes()

    def public_key(self) -> Ed25519PublicKey:
        """Get the corresponding public key."""
        return self._public_key

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Args:
            message: Message to sign

        Returns:
            64-byte Ed25519 signature
        """
        return self._crypto_key.sign(message)

    def __repr__(self) -> str:
        return f"Ed25519PrivateKey(public={self._public_key.to_hex()})"


class Ed25519KeyPair:
    """
    Ed25519 key pair containing both private and public keys.
    """

    def __init__(self, private_key: Ed25519PrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()

    @classmethod
    def generate(cls) -> Ed25519KeyPair:
        """Generate a new random key pair."""
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_seed(cls, seed: bytes) -> Ed25519KeyPair:
        """
        Create deterministic key pair from a seed.

        The same seed always yields the same key pair.

        Raises:
            Ed25519Error: If seed is not exactly 32 bytes
        """
        if len(seed) != SEED_LENGTH:
            raise Ed25519Error("Seed must be exactly 32 bytes")
        return cls(Ed25519PrivateKey(seed))

    @classmethod
    def from_private_bytes(cls, private_key_bytes: bytes) -> Ed25519KeyPair:
        return cls(Ed25519PrivateKey(private_key_bytes))

    def sign(self, message: bytes) -> bytes:
        """Sign a message and return signature bytes."""
        return self.private_key.sign(message)

    def public_key_bytes(self) -> bytes:
        """Get the 32-byte public key."""
        return self.public_key.to_bytes()

    def private_key_bytes(self) -> bytes:
        """Get the 64-byte private key."""
        return self.private_key.to_bytes()

    def verify(self, message: bytes, signature: bytes) -> bool:
        return self.public_key.verify(signature, message)

    def __repr__(self) -> str:
        return f"Ed25519KeyPair(public={self.public_key.to_hex()})"


def generate_keypair(seed: Optional[bytes] = None) -> Tuple[bytes, bytes]:
    """
    Build a key pair and return ``(public_key, private_key)`` as raw bytes.

    Args:
        seed: 32 bytes of entropy; a random seed is used when omitted
    """
    if seed is None:
        key_pair = Ed25519KeyPair.generate()
    else:
        key_pair = Ed25519KeyPair.from_seed(seed)
    return key_pair.public_key_bytes(), key_pair.private_key_bytes()


def sign(private_key: bytes, payload: bytes) -> bytes:
    """Sign ``payload`` with a raw 32 or 64-byte private key."""
    return Ed25519PrivateKey(private_key).sign(payload)


def verify(public_key: bytes, payload: bytes, signature: bytes) -> bool:
    """Verify ``signature`` over ``payload``; malformed input yields False."""
    try:
        return Ed25519PublicKey(public_key).verify(signature, payload)
    except (Ed25519Error, TypeError):
        return False
