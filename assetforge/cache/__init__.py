"""Cache stores for the in-memory and persisted tiers."""

from __future__ import annotations

from pathlib import Path

from assetforge.cache.base import CacheStore
from assetforge.cache.file_store import FileStore
from assetforge.cache.memory import MemoryStore, NullStore
from assetforge.cache.sqlite_store import SqliteStore

CACHE_BACKENDS = ("file", "sqlite", "memory", "null")


def open_store(backend: str, path: Path, *, max_size: int = 1000) -> CacheStore:
    """Build a persisted-tier store by backend name.

    ``path`` is a directory for ``file`` and a database file for ``sqlite``;
    it is ignored by the other backends.
    """
    if backend == "file":
        return FileStore(path)
    if backend == "sqlite":
        return SqliteStore(path)
    if backend == "memory":
        return MemoryStore(max_size)
    if backend == "null":
        return NullStore()
    raise ValueError(f"Unknown cache backend {backend!r}; expected one of {CACHE_BACKENDS}")


__all__ = [
    "CACHE_BACKENDS",
    "CacheStore",
    "FileStore",
    "MemoryStore",
    "NullStore",
    "SqliteStore",
    "open_store",
]
