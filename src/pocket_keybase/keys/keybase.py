r"""
Keybase: storage, operations and persistence of encrypted accounts.

Private keys are encrypted at rest under a passphrase and written to a
``KVStore`` together with an ordered index of account addresses. Accounts
can be unlocked for a limited period to sign without the passphrase.

Every public coroutine except ``verify_signature`` and ``is_unlocked``
returns a ``KeybaseResult``; failures are carried as ``KeybaseError`` values
rather than raised.

Store write order: an import writes the account record before appending to
the index, and a delete removes the index entry before the record. An
interrupted operation can leave an unindexed record but never an index entry
without a record; importing the key again repairs it.
"""

from __future__ import annotations
import functools
import hashlib
import logging
import random
import secrets
from typing import Any, Callable, List, Optional

from ..config import KeybaseConfig
from ..crypto import cipher
from ..crypto.ed25519 import Ed25519Error, Ed25519KeyPair, Ed25519PrivateKey
from ..crypto.ed25519 import verify as ed25519_verify
from ..runtime.errors import (
    AccountNotFoundError,
    EmptyPassphraseError,
    IndexCorruptError,
    InvalidAddressError,
    InvalidArgumentError,
    InvalidPrivateKeyError,
    KeybaseError,
    KeybaseResult,
    NotUnlockedError,
    StoreError,
    WrongPassphraseError,
)
from ..storage.kv_store import InMemoryKVStore, KVStore
from .account import Account, UnlockedAccount
from .address import (
    address_from_public_key,
    public_key_from_private_key,
    validate_address_hex,
    validate_private_key,
)
from .unlocked import UnlockedAccountTable

logger = logging.getLogger(__name__)


def _returns_result(func):
    """Run a keybase coroutine and wrap its outcome in a ``KeybaseResult``."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            value = await func(self, *args, **kwargs)
        except KeybaseError as e:
            logger.debug(f"{func.__name__} failed: [{e.code.name}] {e.message}")
            return KeybaseResult.fail(e)
        return KeybaseResult.ok(value)

    return wrapper


class Keybase:
    """
    Keybase for managing encrypted accounts and their unlock state.

    Each instance owns its own unlocked-account table; two keybases sharing a
    store never share unlock state.
    """

    def __init__(
        self,
        store: Optional[KVStore] = None,
        config: Optional[KeybaseConfig] = None,
        unlocked_accounts: Optional[UnlockedAccountTable] = None,
        entropy_provider: Optional[Callable[[int], bytes]] = None,
    ):
        """
        Initialize the keybase.

        Args:
            store: Store for encrypted accounts, in-memory by default
            config: Store layout and key derivation settings
            unlocked_accounts: Table of unlocked accounts, a new one by default
            entropy_provider: Source of fresh entropy for ``create_account``
        """
        self.store = store if store is not None else InMemoryKVStore()
        self.config = config or KeybaseConfig()
        self.unlocked_accounts = unlocked_accounts if unlocked_accounts is not None else UnlockedAccountTable()
        self._entropy_provider = entropy_provider or secrets.token_bytes

    # Signing helpers
    @staticmethod
    def sign_with(private_key: bytes, payload: bytes) -> KeybaseResult[bytes]:
        """
        Sign an arbitrary payload with a raw Ed25519 private key.

        Args:
            private_key: 32-byte seed or 64-byte private key
            payload: Arbitrary payload to sign

        Returns:
            Result holding the 64-byte signature
        """
        try:
            signing_key = Ed25519PrivateKey(private_key)
        except (Ed25519Error, TypeError) as e:
            return KeybaseResult.fail(InvalidPrivateKeyError(cause=e))
        return KeybaseResult.ok(signing_key.sign(payload))

    # Account lifecycle
    @_returns_result
    async def create_account(self, passphrase: str) -> Account:
        """
        Create a new account and store it in the keybase.

        The key seed comes from a PRNG seeded with the passphrase mixed with
        fresh entropy, hashed with SHA-256.

        Args:
            passphrase: Passphrase for the account in this keybase

        Returns:
            The new account
        """
        self._check_passphrase(passphrase)

        rng = random.Random(passphrase.encode("utf-8") + self._entropy_provider(32))
        seed = hashlib.sha256(repr(rng.random()).encode("utf-8")).digest()
        key_pair = Ed25519KeyPair.from_seed(seed)
        return self._import_account(key_pair.private_key_bytes(), passphrase)

    @_returns_result
    async def import_account(self, private_key: bytes, passphrase: str) -> Account:
        """
        Import an account by its 64-byte private key.

        Importing the same key again replaces the record at its address
        without duplicating the index entry.

        Args:
            private_key: Private key of the account
            passphrase: Passphrase to encrypt the key with

        Returns:
            The imported account
        """
        return self._import_account(private_key, passphrase)

    @_returns_result
    async def list_accounts(self) -> List[Account]:
        """
        List every account in the index, in index order.

        Fails on the first record that cannot be read; no partial list is
        returned.
        """
        accounts = []
        for address_hex in self._read_index():
            try:
                accounts.append(self._get_account_from_store(address_hex))
            except (AccountNotFoundError, InvalidAddressError) as e:
                raise IndexCorruptError(
                    "Index references an account that cannot be loaded",
                    details={"addressHex": address_hex},
                    cause=e,
                )
        return accounts

    @_returns_result
    async def get_account(self, address_hex: str) -> Account:
        """
        Retrieve a single account.

        Args:
            address_hex: Address of the account in hex format
        """
        return self._get_account_from_store(address_hex)

    @_returns_result
    async def get_unlocked_account(self, address_hex: str, passphrase: str) -> UnlockedAccount:
        """
        Decrypt an account for one time use.

        The result is handed to the caller and not added to the unlocked table.
        """
        return self._unlock_from_persistence(address_hex, passphrase)

    @_returns_result
    async def delete_account(self, address_hex: str, passphrase: str) -> None:
        """
        Delete an account, gated on the passphrase.

        Args:
            address_hex: Address of the account to delete
            passphrase: Passphrase of the account
        """
        unlocked_account = self._unlock_from_persistence(address_hex, passphrase)
        self._remove_account_record(unlocked_account.account)
        self.unlocked_accounts.remove(unlocked_account.address_hex)
        logger.debug(f"Deleted account {unlocked_account.address_hex}")

    @_returns_result
    async def update_account_passphrase(
        self,
        address_hex: str,
        passphrase: str,
        new_passphrase: str,
    ) -> None:
        """
        Re-encrypt an account under a new passphrase.

        The old record is removed and the key imported again. If that import
        fails the account stays deleted and the error is returned. An unlocked
        account is locked again.

        Args:
            address_hex: Address of the account to update
            passphrase: Current passphrase
            new_passphrase: Passphrase the account will be encrypted with
        """
        self._check_passphrase(new_passphrase)
        unlocked_account = self._unlock_from_persistence(address_hex, passphrase)
        self._remove_account_record(unlocked_account.account)
        self.unlocked_accounts.remove(unlocked_account.address_hex)
        self._import_account(unlocked_account.private_key, new_passphrase)
        logger.debug(f"Updated passphrase of account {unlocked_account.address_hex}")

    @_returns_result
    async def export_account(self, address_hex: str, passphrase: str) -> bytes:
        """
        Export the plaintext private key of an account.

        Returns:
            64-byte private key
        """
        return self._unlock_from_persistence(address_hex, passphrase).private_key

    # Signing
    @_returns_result
    async def sign(self, address_hex: str, passphrase: str, payload: bytes) -> bytes:
        """
        Sign a payload with a stored account, decrypting it for this call only.

        The unlock state of the account is left untouched.
        """
        unlocked_account = self._unlock_from_persistence(address_hex, passphrase)
        return self.sign_with(unlocked_account.private_key, payload).unwrap()

    @_returns_result
    async def sign_with_unlocked_account(self, address_hex: str, payload: bytes) -> bytes:
        """
        Sign a payload with an unlocked account.

        Args:
            address_hex: Address of the unlocked account
            payload: Payload to sign
        """
        address_hex = self._check_address(address_hex)
        unlocked_account = self.unlocked_accounts.get(address_hex)
        if unlocked_account is None:
            raise NotUnlockedError(details={"addressHex": address_hex})
        return self.sign_with(unlocked_account.private_key, payload).unwrap()

    async def verify_signature(self, signer_public_key: bytes, payload: bytes, signature: bytes) -> bool:
        """Verify ``signature`` over ``payload`` for ``signer_public_key``."""
        return ed25519_verify(signer_public_key, payload, signature)

    # Unlock state
    @_returns_result
    async def unlock_account(
        self,
        address_hex: str,
        passphrase: str,
        unlock_period: Optional[float] = None,
    ) -> None:
        """
        Unlock an account for passphrase free signing.

        Args:
            address_hex: Address of the account to unlock
            passphrase: Passphrase of the account
            unlock_period: Seconds the account stays unlocked, defaults to
                ``config.default_unlock_period``; 0 keeps it unlocked until
                ``lock_account`` is called
        """
        if unlock_period is None:
            unlock_period = self.config.default_unlock_period
        if unlock_period < 0:
            raise InvalidArgumentError(
                "Unlock period cannot be negative", details={"unlockPeriod": unlock_period}
            )

        unlocked_account = self._unlock_from_persistence(address_hex, passphrase)
        self.unlocked_accounts.insert(unlocked_account, unlock_period)
        logger.debug(f"Unlocked account {unlocked_account.address_hex} for {unlock_period}s")

    @_returns_result
    async def lock_account(self, address_hex: str) -> None:
        """
        Lock an unlocked account so signing requires the passphrase again.
        """
        address_hex = self._check_address(address_hex)
        if not self.unlocked_accounts.remove(address_hex):
            raise NotUnlockedError(details={"addressHex": address_hex})
        logger.debug(f"Locked account {address_hex}")

    async def is_unlocked(self, address_hex: str) -> bool:
        """Return whether the account is unlocked."""
        if not isinstance(address_hex, str):
            return False
        return address_hex.lower() in self.unlocked_accounts

    async def lock_all(self) -> int:
        """
        Lock every unlocked account.

        Returns:
            Number of accounts locked
        """
        count = self.unlocked_accounts.clear()
        if count:
            logger.debug(f"Locked {count} accounts")
        return count

    # Private interface
    def _check_passphrase(self, passphrase: Any) -> None:
        self._check_passphrase_type(passphrase)
        if len(passphrase) == 0:
            raise EmptyPassphraseError()

    def _check_passphrase_type(self, passphrase: Any) -> None:
        if not isinstance(passphrase, str):
            raise InvalidArgumentError("Passphrase must be a string")
        try:
            passphrase.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidArgumentError("Passphrase is not valid UTF-8 text", cause=e)

    def _check_address(self, address_hex: Any) -> str:
        validation_error = validate_address_hex(address_hex)
        if validation_error is not None:
            raise validation_error
        return address_hex.lower()

    def _derive_key(self, passphrase: str) -> bytes:
        return cipher.derive_key(
            passphrase,
            iterations=self.config.kdf_iterations,
            length=self.config.key_length,
            hash_name=self.config.kdf_hash,
        )

    def _import_account(self, private_key: bytes, passphrase: str) -> Account:
        self._check_passphrase(passphrase)
        if not validate_private_key(private_key):
            raise InvalidPrivateKeyError()

        private_key = bytes(private_key)
        public_key = public_key_from_private_key(private_key)
        key = self._derive_key(passphrase)
        account = Account(
            public_key=public_key,
            encrypted_private_key_hex=cipher.encrypt_hex(key, private_key),
        )
        self._persist_account(account)
        logger.debug(f"Imported account {account.address_hex}")
        return account

    def _unlock_from_persistence(self, address_hex: str, passphrase: str) -> UnlockedAccount:
        """
        Decrypt the stored account and check the key really belongs to it.

        CTR decryption never fails on a wrong key, so the decrypted key must
        be consistent (its public half derived from its seed half) and its
        address must match the record.
        """
        address_hex = self._check_address(address_hex)
        account = self._get_account_from_store(address_hex)
        self._check_passphrase_type(passphrase)

        key = self._derive_key(passphrase)
        try:
            private_key = cipher.decrypt_hex(key, account.encrypted_private_key_hex)
        except ValueError as e:
            raise WrongPassphraseError(details={"addressHex": address_hex}, cause=e)

        if not validate_private_key(private_key):
            raise WrongPassphraseError(details={"addressHex": address_hex})
        decrypted_address = address_from_public_key(public_key_from_private_key(private_key))
        if decrypted_address != account.address_hex:
            raise WrongPassphraseError(details={"addressHex": address_hex})
        return UnlockedAccount(account=account, private_key=private_key)

    # Internal persistence interface
    def _store_get(self, key: str) -> Any:
        try:
            return self.store.get(key)
        except Exception as e:
            raise StoreError(f"Failed to read {key}", cause=e)

    def _store_add(self, key: str, value: Any) -> None:
        try:
            self.store.add(key, value)
        except Exception as e:
            raise StoreError(f"Failed to write {key}", cause=e)

    def _store_remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as e:
            raise StoreError(f"Failed to remove {key}", cause=e)

    def _read_index(self) -> List[str]:
        account_index = self._store_get(self.config.account_index_key)
        if account_index is None:
            return []
        if not isinstance(account_index, list) or not all(isinstance(a, str) for a in account_index):
            raise IndexCorruptError("Error fetching the account index")
        return list(account_index)

    def _persist_account(self, account: Account) -> None:
        account_index = self._read_index()
        self._store_add(self.config.account_key(account.address_hex), account.to_dict())
        if account.address_hex not in account_index:
            account_index.append(account.address_hex)
            self._store_add(self.config.account_index_key, account_index)

    def _remove_account_record(self, account: Account) -> None:
        account_index = self._read_index()
        if account.address_hex in account_index:
            account_index = [a for a in account_index if a != account.address_hex]
            self._store_add(self.config.account_index_key, account_index)
        self._store_remove(self.config.account_key(account.address_hex))

    def _get_account_from_store(self, address_hex: str) -> Account:
        address_hex = self._check_address(address_hex)
        record = self._store_get(self.config.account_key(address_hex))
        if record is None:
            raise AccountNotFoundError(details={"addressHex": address_hex})

        if isinstance(record, Account):
            account = record
        elif isinstance(record, dict):
            account = Account.from_dict(record)
        else:
            raise IndexCorruptError(
                "Error fetching account from store", details={"addressHex": address_hex}
            )

        if account.address_hex != address_hex:
            raise IndexCorruptError(
                "Stored account does not belong to its key", details={"addressHex": address_hex}
            )
        return account

    def __repr__(self) -> str:
        return f"Keybase(store={self.store!r}, unlocked={len(self.unlocked_accounts)})"
