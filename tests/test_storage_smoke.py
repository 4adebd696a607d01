"""Smoke tests for storage/blob module."""

import pytest

from english_hub.storage.blob import JsonFileBlobStore, MemoryBlobStore


class TestMemoryBlobStore:
    def test_missing_key_returns_none(self):
        assert MemoryBlobStore().get("english-hub-user") is None

    def test_set_then_get(self):
        store = MemoryBlobStore()
        store.set("k", '{"xp": 10}')
        assert store.get("k") == '{"xp": 10}'

    def test_initial_blobs_are_copied(self):
        initial = {"k": "v"}
        store = MemoryBlobStore(initial)
        store.set("k", "changed")
        assert initial["k"] == "v"


class TestJsonFileBlobStore:
    def test_returns_none_when_no_file(self, tmp_path):
        assert JsonFileBlobStore(tmp_path).get("english-hub-user") is None

    def test_creates_directory_and_file(self, tmp_path):
        directory = tmp_path / "data" / "progress"
        store = JsonFileBlobStore(directory)
        store.set("english-hub-user", "{}")
        assert (directory / "english-hub-user.json").exists()

    def test_overwrite_replaces_content(self, tmp_path):
        store = JsonFileBlobStore(tmp_path)
        store.set("k", '{"xp": 1}')
        store.set("k", '{"xp": 2}')
        assert store.get("k") == '{"xp": 2}'

    def test_unicode_content(self, tmp_path):
        store = JsonFileBlobStore(tmp_path)
        store.set("k", '{"meaning": "証拠"}')
        assert store.get("k") == '{"meaning": "証拠"}'

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileBlobStore(tmp_path)
        for i in range(3):
            store.set("k", str(i))
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "with space"])
    def test_invalid_keys_rejected(self, tmp_path, key):
        store = JsonFileBlobStore(tmp_path)
        with pytest.raises(ValueError):
            store.set(key, "{}")
