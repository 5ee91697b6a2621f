"""
Key-value store contract used by the keybase.

Provides the abstract ``KVStore`` interface plus an in-memory and a JSON file
backed implementation.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union
import copy
import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


class KVStore(ABC):
    """
    Abstract key-value store.

    Last write wins per key. No ordering or transactional guarantees.
    """

    @abstractmethod
    def add(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Args:
            key: Store key
            value: Value to store
        """
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Fetch the value under ``key``.

        Args:
            key: Store key

        Returns:
            The stored value, or None if absent
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove ``key``. Removing an absent key is not an error.

        Args:
            key: Store key
        """
        pass

    def has(self, key: str) -> bool:
        """Check if a value is stored under ``key``."""
        return self.get(key) is not None


class InMemoryKVStore(KVStore):
    """
    In-memory key-value store.

    Values are kept as given, with no persistence. Lists are copied on the way
    in and out so callers cannot mutate stored state by accident.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def add(self, key: str, value: Any) -> None:
        self._data[key] = _detach(value)

    def get(self, key: str) -> Optional[Any]:
        return _detach(self._data.get(key))

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"InMemoryKVStore(count={len(self._data)})"


class JsonFileKVStore(KVStore):
    """
    Key-value store persisted as a single JSON document.

    Values must be JSON serializable. Every write rewrites the whole file
    through a temporary file and an atomic rename. The in-memory view only
    changes once the rename has succeeded.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the file store.

        Args:
            path: JSON file to use; created on the first write
        """
        self.path = Path(path)
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not contain a JSON object")
        return data

    def _flush(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def add(self, key: str, value: Any) -> None:
        data = dict(self._data)
        data[key] = json.loads(json.dumps(value))
        self._flush(data)
        self._data = data
        logger.debug(f"Wrote key {key} to {self.path}")

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def remove(self, key: str) -> None:
        if key in self._data:
            data = {k: v for k, v in self._data.items() if k != key}
            self._flush(data)
            self._data = data
            logger.debug(f"Removed key {key} from {self.path}")

    def reload(self) -> None:
        """Re-read the file, discarding the in-memory view."""
        self._data = self._load()

    def __repr__(self) -> str:
        return f"JsonFileKVStore(path='{self.path}', count={len(self._data)})"


def _detach(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return copy.deepcopy(value)
    return value


__all__ = [
    "KVStore",
    "InMemoryKVStore",
    "JsonFileKVStore",
]
