"""In-process stores: a thread-safe LRU and a store that keeps nothing."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any


class MemoryStore:
    """Least-recently-used store guarded by a lock.

    Parameters
    ----------
    max_size:
        Entries kept before the least recently used one is evicted.
    """

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._max_size = max_size
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def set(self, key: str, value: Any) -> Any:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


class NullStore:
    """A store that never holds anything."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any) -> Any:
        return value
