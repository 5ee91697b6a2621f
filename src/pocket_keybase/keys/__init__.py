"""
Account management: encrypted accounts, the unlock table and the keybase.
"""

from .account import Account, UnlockedAccount
from .address import (
    address_from_public_key,
    public_key_from_private_key,
    validate_address_hex,
    validate_private_key,
    validate_public_key,
)
from .unlocked import UnlockedAccountTable, UnlockEntry
from .keybase import Keybase

__all__ = [
    "Account",
    "UnlockedAccount",
    "UnlockedAccountTable",
    "UnlockEntry",
    "Keybase",
    "address_from_public_key",
    "public_key_from_private_key",
    "validate_address_hex",
    "validate_private_key",
    "validate_public_key",
]
