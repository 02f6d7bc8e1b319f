"""Tests for cache stores — memory LRU, file store, SQLite store, null store."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from assetforge.cache import (
    CacheStore,
    FileStore,
    MemoryStore,
    NullStore,
    SqliteStore,
    open_store,
)


class TestMemoryStore:
    def test_get_missing(self):
        assert MemoryStore().get("nope") is None

    def test_set_returns_value(self):
        store = MemoryStore()
        value = {"a": 1}
        assert store.set("k", value) is value
        assert store.get("k") is value

    def test_evicts_least_recently_used(self):
        store = MemoryStore(max_size=2)
        store.set("a", 1)
        store.set("b", 2)
        store.get("a")
        store.set("c", 3)
        assert "a" in store
        assert "b" not in store
        assert "c" in store
        assert len(store) == 2

    def test_overwrite_does_not_grow(self):
        store = MemoryStore(max_size=2)
        store.set("a", 1)
        store.set("a", 2)
        assert len(store) == 1
        assert store.get("a") == 2

    def test_clear(self):
        store = MemoryStore()
        store.set("a", 1)
        store.clear()
        assert len(store) == 0

    def test_reads_take_the_lock(self):
        store = MemoryStore()
        store.set("a", 1)
        seen = []
        reader = threading.Thread(target=lambda: seen.append((len(store), "a" in store)))
        with store._lock:
            reader.start()
            reader.join(timeout=0.1)
            assert reader.is_alive()
        reader.join()
        assert seen == [(1, True)]

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError, match="max_size"):
            MemoryStore(max_size=0)

    def test_concurrent_writers(self):
        store = MemoryStore(max_size=50)

        def write(prefix: str) -> None:
            for i in range(200):
                store.set(f"{prefix}-{i}", i)

        threads = [threading.Thread(target=write, args=(str(n),)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(store) == 50


class TestNullStore:
    def test_keeps_nothing(self):
        store = NullStore()
        assert store.set("k", 1) == 1
        assert store.get("k") is None


class TestFileStore:
    def test_round_trip(self, tmp_path: Path):
        store = FileStore(tmp_path / "cache")
        store.set("key", {"source": "var a;", "length": 6})
        assert store.get("key") == {"source": "var a;", "length": 6}
        assert store.exists("key")

    def test_missing(self, tmp_path: Path):
        assert FileStore(tmp_path / "cache").get("missing") is None

    def test_sharded_layout(self, tmp_path: Path):
        store = FileStore(tmp_path / "cache")
        store.set("key", 1)
        files = list((tmp_path / "cache").rglob("*.json"))
        assert len(files) == 1
        relative = files[0].relative_to(tmp_path / "cache")
        assert len(relative.parts) == 3
        assert relative.parts[1] == relative.stem[2:4]

    def test_persists_across_instances(self, tmp_path: Path):
        FileStore(tmp_path / "cache").set("key", [1, 2])
        assert FileStore(tmp_path / "cache").get("key") == [1, 2]

    def test_no_temporary_files_left(self, tmp_path: Path):
        store = FileStore(tmp_path / "cache")
        for i in range(5):
            store.set("key", i)
        assert list((tmp_path / "cache").rglob("*.tmp")) == []
        assert store.get("key") == 4

    def test_corrupt_entry_is_missing(self, tmp_path: Path, caplog):
        store = FileStore(tmp_path / "cache")
        store.set("key", 1)
        path = next((tmp_path / "cache").rglob("*.json"))
        path.write_text("{not json", encoding="utf-8")
        assert store.get("key") is None
        assert "corrupt cache entry" in caplog.text

    def test_entry_for_another_key_is_missing(self, tmp_path: Path):
        store = FileStore(tmp_path / "cache")
        store.set("key", 1)
        path = next((tmp_path / "cache").rglob("*.json"))
        path.write_text(json.dumps({"key": "other", "value": 2}), encoding="utf-8")
        assert store.get("key") is None


class TestSqliteStore:
    def test_round_trip(self, tmp_path: Path):
        store = SqliteStore(tmp_path / "cache.db")
        store.set("key", {"a": [1, 2]})
        assert store.get("key") == {"a": [1, 2]}

    def test_missing(self, tmp_path: Path):
        assert SqliteStore(tmp_path / "cache.db").get("missing") is None

    def test_replace(self, tmp_path: Path):
        store = SqliteStore(tmp_path / "cache.db")
        store.set("key", 1)
        store.set("key", 2)
        assert store.get("key") == 2
        assert store.count() == 1

    def test_persists_across_instances(self, tmp_path: Path):
        SqliteStore(tmp_path / "nested" / "cache.db").set("key", "v")
        assert SqliteStore(tmp_path / "nested" / "cache.db").get("key") == "v"


class TestOpenStore:
    @pytest.mark.parametrize(
        "backend, cls",
        [
            ("file", FileStore),
            ("sqlite", SqliteStore),
            ("memory", MemoryStore),
            ("null", NullStore),
        ],
    )
    def test_backends(self, tmp_path: Path, backend, cls):
        store = open_store(backend, tmp_path / "cache")
        assert isinstance(store, cls)
        assert isinstance(store, CacheStore)

    def test_unknown_backend(self, tmp_path: Path):
        with pytest.raises(ValueError, match="Unknown cache backend"):
            open_store("redis", tmp_path)
