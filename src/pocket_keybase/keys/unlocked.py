"""
In-memory table of unlocked accounts.

Each entry holds a generation token and, when the unlock is time limited, the
``asyncio.TimerHandle`` that re-locks it. A timer only removes the entry it
was scheduled for: if the account was locked and unlocked again in the
meantime the generation no longer matches and the stale timer does nothing.
"""

from __future__ import annotations
import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .account import UnlockedAccount

logger = logging.getLogger(__name__)


@dataclass
class UnlockEntry:
    """Unlocked account plus its auto-lock bookkeeping."""
    unlocked_account: UnlockedAccount
    generation: int
    timer: Optional[asyncio.TimerHandle] = None

    @property
    def expires_at(self) -> Optional[float]:
        """Loop time at which the entry re-locks, None if never."""
        if self.timer is None:
            return None
        return self.timer.when()

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class UnlockedAccountTable:
    """
    Unlocked accounts keyed by address.

    Owned by a single keybase; the mapping is guarded by a lock so a manual
    lock and a timer-driven lock never race.
    """

    def __init__(self):
        self._entries: Dict[str, UnlockEntry] = {}
        self._lock = threading.Lock()
        self._generations = itertools.count(1)

    def insert(
        self,
        unlocked_account: UnlockedAccount,
        unlock_period: float = 0,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> int:
        """
        Add or replace the entry for the account's address.

        Args:
            unlocked_account: Decrypted account
            unlock_period: Seconds until the entry is removed, 0 for never
            loop: Event loop to schedule the re-lock on, defaults to the running loop

        Returns:
            Generation token of the new entry
        """
        address_hex = unlocked_account.address_hex
        with self._lock:
            generation = next(self._generations)
            entry = UnlockEntry(unlocked_account=unlocked_account, generation=generation)
            if unlock_period > 0:
                loop = loop or asyncio.get_running_loop()
                entry.timer = loop.call_later(unlock_period, self.expire, address_hex, generation)

            previous = self._entries.get(address_hex)
            if previous is not None:
                previous.cancel()
            self._entries[address_hex] = entry
        return generation

    def remove(self, address_hex: str) -> bool:
        """Remove the entry and cancel its timer. Returns False if absent."""
        with self._lock:
            entry = self._entries.pop(address_hex, None)
            if entry is None:
                return False
            entry.cancel()
        return True

    def expire(self, address_hex: str, generation: int) -> bool:
        """
        Timer callback: remove the entry only if it is still ``generation``.
        """
        with self._lock:
            entry = self._entries.get(address_hex)
            if entry is None or entry.generation != generation:
                return False
            del self._entries[address_hex]
            entry.timer = None
        logger.debug(f"Unlock period elapsed, locked account {address_hex}")
        return True

    def get(self, address_hex: str) -> Optional[UnlockedAccount]:
        with self._lock:
            entry = self._entries.get(address_hex)
            return entry.unlocked_account if entry is not None else None

    def entry(self, address_hex: str) -> Optional[UnlockEntry]:
        with self._lock:
            return self._entries.get(address_hex)

    def addresses(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> int:
        """Remove every entry and cancel every timer. Returns the count removed."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
            for entry in entries:
                entry.cancel()
        return len(entries)

    def __contains__(self, address_hex: object) -> bool:
        with self._lock:
            return address_hex in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"UnlockedAccountTable(count={len(self)})"
