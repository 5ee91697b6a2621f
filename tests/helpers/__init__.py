from .factories import mk_seed, mk_private_key, mk_public_key, RecordingKVStore, FailingKVStore

__all__ = [
    "mk_seed",
    "mk_private_key",
    "mk_public_key",
    "RecordingKVStore",
    "FailingKVStore",
]
