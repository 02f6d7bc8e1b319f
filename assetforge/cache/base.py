"""Key-value store contract shared by both cache tiers."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """A key-value store. ``get`` returns ``None`` for a missing key.

    ``get`` and ``set`` must each be atomic per key. No cross-key
    transactions are assumed.
    """

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> Any: ...
