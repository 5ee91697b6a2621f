"""
Pocket Keybase - local credential vault for blockchain accounts

Generates Ed25519 accounts, keeps their private keys encrypted under a
passphrase in a pluggable key-value store, and signs with accounts that are
unlocked for a bounded period.
"""

from .config import KeybaseConfig
from .keys import (
    Account,
    Keybase,
    UnlockedAccount,
    UnlockedAccountTable,
    address_from_public_key,
    public_key_from_private_key,
    validate_address_hex,
    validate_private_key,
)
from .runtime.errors import *
from .storage import KVStore, InMemoryKVStore, JsonFileKVStore

__version__ = "0.1.0"
__all__ = [
    # Keybase
    "Keybase",
    "KeybaseConfig",
    "Account",
    "UnlockedAccount",
    "UnlockedAccountTable",

    # Storage
    "KVStore",
    "InMemoryKVStore",
    "JsonFileKVStore",

    # Address and key helpers
    "address_from_public_key",
    "public_key_from_private_key",
    "validate_address_hex",
    "validate_private_key",

    # Errors
    "ErrorCode",
    "KeybaseError",
    "KeybaseResult",
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
]
