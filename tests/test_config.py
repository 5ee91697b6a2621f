"""
Keybase configuration tests.
"""

import pytest
from pydantic import ValidationError

from pocket_keybase.config import KeybaseConfig


class TestKeybaseConfig:

    def test_defaults(self):
        config = KeybaseConfig()

        assert config.account_store_prefix == "account_"
        assert config.account_index_key == "account_index"
        assert config.default_unlock_period == 600.0
        assert config.kdf_iterations == 1
        assert config.kdf_hash == "sha256"
        assert config.key_length == 32

    def test_account_key(self):
        assert KeybaseConfig().account_key("ab" * 20) == "account_" + "ab" * 20

    def test_aliases(self):
        config = KeybaseConfig(**{"defaultUnlockPeriod": 5, "kdfHash": "sha1"})

        assert config.default_unlock_period == 5
        assert config.kdf_hash == "sha1"
        assert config.to_dict()["defaultUnlockPeriod"] == 5

    @pytest.mark.parametrize("kwargs", [
        {"default_unlock_period": -1},
        {"kdf_iterations": 0},
        {"kdf_hash": "md5"},
        {"key_length": 20},
        {"account_index_key": ""},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            KeybaseConfig(**kwargs)

    def test_frozen(self):
        config = KeybaseConfig()

        with pytest.raises(ValidationError):
            config.kdf_iterations = 5
