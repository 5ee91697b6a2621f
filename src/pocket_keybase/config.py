"""
Keybase configuration.

Store key layout, the default unlock period and the key derivation settings
used to encrypt private keys at rest.
"""

from __future__ import annotations
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, field_validator


class KeybaseConfig(BaseModel):
    """
    Settings for a ``Keybase`` instance.

    The derivation settings must match the ones used when the stored
    accounts were encrypted; changing them makes existing records unreadable.
    """
    account_store_prefix: str = Field(
        default="account_", alias="accountStorePrefix", min_length=1,
        description="Prefix of the store key holding each account record"
    )
    account_index_key: str = Field(
        default="account_index", alias="accountIndexKey", min_length=1,
        description="Store key of the ordered address index"
    )
    default_unlock_period: float = Field(
        default=600.0, alias="defaultUnlockPeriod", ge=0,
        description="Seconds an account stays unlocked when no period is given, 0 for no limit"
    )
    kdf_iterations: int = Field(default=1, alias="kdfIterations", ge=1, description="PBKDF2 iterations")
    kdf_hash: Literal["sha256", "sha1"] = Field(
        default="sha256", alias="kdfHash", description="PBKDF2 pseudo-random function"
    )
    key_length: int = Field(default=32, alias="keyLength", description="AES key length in bytes")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("key_length")
    @classmethod
    def validate_key_length(cls, v: int) -> int:
        if v not in (16, 24, 32):
            raise ValueError("key_length must be 16, 24 or 32 bytes")
        return v

    def account_key(self, address_hex: str) -> str:
        """Store key of the account record at ``address_hex``."""
        return self.account_store_prefix + address_hex

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a camelCase dictionary."""
        return self.model_dump(by_alias=True)
