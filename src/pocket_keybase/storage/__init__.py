"""Key-value storage for encrypted accounts."""

from .kv_store import KVStore, InMemoryKVStore, JsonFileKVStore

__all__ = [
    "KVStore",
    "InMemoryKVStore",
    "JsonFileKVStore",
]
