"""
Account models.

``Account`` is the durable, encrypted record kept in the store.
``UnlockedAccount`` pairs an account with its decrypted private key and only
ever lives in memory.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

from ..runtime.errors import IndexCorruptError, InvalidPublicKeyError
from .address import address_from_public_key, validate_address_hex


@dataclass(frozen=True)
class Account:
    """
    Encrypted account record.

    The address is always derived from ``public_key``; it is never accepted
    from the caller.
    """
    public_key: bytes
    encrypted_private_key_hex: str
    address_hex: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_key", bytes(self.public_key))
        object.__setattr__(self, "address_hex", address_from_public_key(self.public_key))

    def to_dict(self) -> Dict[str, str]:
        """Convert to the persisted record shape."""
        return {
            "publicKey": self.public_key.hex(),
            "addressHex": self.address_hex,
            "encryptedPrivateKeyHex": self.encrypted_private_key_hex,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Account:
        """
        Create from the persisted record shape.

        ``publicKey`` may be hex or raw bytes. A stored ``addressHex`` that
        does not match the public key makes the record unusable.

        Raises:
            IndexCorruptError: If the record is malformed
        """
        try:
            public_key = data["publicKey"]
            if isinstance(public_key, str):
                public_key = bytes.fromhex(public_key)
            encrypted_hex = data["encryptedPrivateKeyHex"]
            bytes.fromhex(encrypted_hex)
            account = cls(public_key=public_key, encrypted_private_key_hex=encrypted_hex)
        except (KeyError, TypeError, ValueError, InvalidPublicKeyError) as e:
            raise IndexCorruptError("Malformed account record", cause=e)

        stored_address = data.get("addressHex")
        if stored_address is not None:
            if validate_address_hex(stored_address) is not None or stored_address.lower() != account.address_hex:
                raise IndexCorruptError(
                    "Account record address does not match its public key",
                    details={"addressHex": stored_address},
                )
        return account

    def __repr__(self) -> str:
        return f"Account(address='{self.address_hex}')"


@dataclass(frozen=True, repr=False)
class UnlockedAccount:
    """Account together with its plaintext private key. Never persisted."""
    account: Account
    private_key: bytes

    @property
    def address_hex(self) -> str:
        return self.account.address_hex

    @property
    def public_key(self) -> bytes:
        return self.account.public_key

    @property
    def encrypted_private_key_hex(self) -> str:
        return self.account.encrypted_private_key_hex

    def __repr__(self) -> str:
        return f"UnlockedAccount(address='{self.address_hex}')"
