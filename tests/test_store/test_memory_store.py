"""Tests for the dict-backed MemoryStore."""

from __future__ import annotations

import pytest

from fetchcache.exceptions import StorageError
from fetchcache.store import MemoryStore


class TestMemoryStore:
    def test_set_get_delete(self) -> None:
        store = MemoryStore()
        store.set("k", {"a": 1}, version=2)

        entry = store.get("k")
        assert entry.value == {"a": 1}
        assert entry.version == 2
        assert "k" in store

        store.delete("k")
        assert store.get("k") is None
        assert len(store) == 0

    def test_delete_missing_key_no_error(self) -> None:
        MemoryStore().delete("nope")

    def test_version_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            MemoryStore().set("k", "v", version=0)

    def test_quota_rejects_new_keys(self) -> None:
        store = MemoryStore(max_entries=1)
        store.set("a", 1, version=1)

        with pytest.raises(StorageError, match="quota"):
            store.set("b", 2, version=1)
        assert store.get("b") is None

    def test_quota_allows_overwrite(self) -> None:
        store = MemoryStore(max_entries=1)
        store.set("a", 1, version=1)
        store.set("a", 2, version=2)
        assert store.get("a").value == 2

    def test_clear(self) -> None:
        store = MemoryStore()
        store.set("a", 1, version=1)
        store.clear()
        assert len(store) == 0

    def test_context_manager(self) -> None:
        with MemoryStore() as store:
            store.set("a", 1, version=1)
        assert store.get("a") is not None

    def test_values_are_copied_in_and_out(self) -> None:
        payload = {"items": [1]}
        store = MemoryStore()
        store.set("k", payload, version=1)

        payload["items"].append(2)
        store.get("k").value["items"].append(3)

        assert store.get("k").value == {"items": [1]}
