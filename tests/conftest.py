"""
Shared fixtures for keybase tests.
"""
import pathlib
import sys

import pytest

# Make the helpers package importable from every test directory
TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from helpers import RecordingKVStore, mk_private_key  # noqa: E402

from pocket_keybase.keys.keybase import Keybase  # noqa: E402

PASSPHRASE = "correct-horse"


@pytest.fixture
def passphrase():
    return PASSPHRASE


@pytest.fixture
def private_key():
    """Deterministic 64-byte private key."""
    return mk_private_key(1)


@pytest.fixture
def store():
    return RecordingKVStore()


@pytest.fixture
def keybase(store):
    """Keybase over a recording in-memory store."""
    return Keybase(store)
