"""
Key-value store tests.

Tests the in-memory and JSON file stores against the add/get/remove contract.
"""

import json
import os

import pytest

from pocket_keybase.storage.kv_store import InMemoryKVStore, JsonFileKVStore


@pytest.fixture(params=["memory", "file"])
def kv_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryKVStore()
    return JsonFileKVStore(tmp_path / "store.json")


class TestStoreContract:

    def test_get_absent(self, kv_store):
        assert kv_store.get("missing") is None
        assert not kv_store.has("missing")

    def test_add_and_get(self, kv_store):
        kv_store.add("key", {"a": 1})

        assert kv_store.get("key") == {"a": 1}
        assert kv_store.has("key")

    def test_last_write_wins(self, kv_store):
        kv_store.add("key", ["first"])
        kv_store.add("key", ["second"])

        assert kv_store.get("key") == ["second"]

    def test_remove(self, kv_store):
        kv_store.add("key", "value")
        kv_store.remove("key")

        assert kv_store.get("key") is None

    def test_remove_absent_is_noop(self, kv_store):
        kv_store.remove("missing")

    def test_returned_lists_are_detached(self, kv_store):
        kv_store.add("index", ["a"])
        kv_store.get("index").append("b")

        assert kv_store.get("index") == ["a"]


class TestJsonFileKVStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileKVStore(path).add("key", {"value": 1})

        assert JsonFileKVStore(path).get("key") == {"value": 1}

    def test_file_contents(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        store = JsonFileKVStore(path)
        store.add("key", [1, 2])

        assert json.loads(path.read_text()) == {"key": [1, 2]}

    def test_rejects_non_json_values(self, tmp_path):
        store = JsonFileKVStore(tmp_path / "store.json")

        with pytest.raises(TypeError):
            store.add("key", b"raw bytes")
        assert store.get("key") is None

    def test_rejects_non_object_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ValueError):
            JsonFileKVStore(path)

    def test_reload(self, tmp_path):
        path = tmp_path / "store.json"
        first = JsonFileKVStore(path)
        second = JsonFileKVStore(path)

        first.add("key", "value")
        assert second.get("key") is None

        second.reload()
        assert second.get("key") == "value"

    def test_failed_write_keeps_previous_state(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"
        store = JsonFileKVStore(path)
        store.add("key", "old")

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)

        with pytest.raises(OSError):
            store.add("key", "new")
        with pytest.raises(OSError):
            store.remove("key")

        assert store.get("key") == "old"
        assert json.loads(path.read_text()) == {"key": "old"}
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]
