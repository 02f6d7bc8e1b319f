"""Immutable, caching view of an ``Environment``.

Every filesystem question (stat, directory entries, file digests) is
answered once per view and memoized, which is safe because a view assumes the
filesystem does not change during its lifetime. Built assets go through two
tiers:

1. the view's in-memory store, trusted without validation;
2. the environment's persisted store, revalidated against the live
   dependency digest before use.

Anything missing or stale is rebuilt, written to both tiers and returned.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from assetforge.cache.memory import MemoryStore
from assetforge.core.asset import Asset
from assetforge.core.base import Base
from assetforge.core.hasher import hexdigest
from assetforge.core.serialization import decode_asset, encode_asset, load_payload
from assetforge.errors import ImmutabilityViolation, UnserializeError

if TYPE_CHECKING:
    from assetforge.core.environment import Environment

logger = logging.getLogger(__name__)

_MISSING = object()


class CachedEnvironment(Base):
    """Snapshot of *environment* with memoized filesystem access and asset caching.

    Do not construct directly; use ``Environment.cached()``. The view has no
    registration methods, and its registry and MIME table are frozen copies.
    """

    def __init__(self, environment: Environment) -> None:
        self._environment = environment
        self._paths = environment.paths
        self._registry = environment.registry.snapshot()
        self._mime_types = environment.mime_types.copy(frozen=True)
        self._cache = environment.cache
        self._digest_algorithm = environment.digest_algorithm
        self._version = environment.version
        self._memory: MemoryStore = environment.new_memory_store()
        self._stats: dict[str, object] = {}
        self._entries: dict[str, list[str]] = {}
        self._digests: dict[str, str | None] = {}
        self._version_digest = hexdigest(self.fingerprint(), algorithm=self._digest_algorithm)
        self._init_building()

    @property
    def version_digest(self) -> str:
        return self._version_digest

    @property
    def memory(self) -> MemoryStore:
        """The in-memory tier, keyed like the persisted tier."""
        return self._memory

    def cached(self) -> CachedEnvironment:
        return self

    def expire_cache(self) -> None:
        raise ImmutabilityViolation("can't modify immutable cached environment")

    # -- Memoized filesystem access ----------------------------------------

    def stat(self, path: str) -> os.stat_result | None:
        stat = self._stats.get(path, _MISSING)
        if stat is _MISSING:
            stat = self._stats[path] = super().stat(path)
        return stat  # type: ignore[return-value]

    def entries(self, path: str) -> list[str]:
        if path not in self._entries:
            self._entries[path] = super().entries(path)
        return list(self._entries[path])

    def file_hexdigest(self, path: str) -> str | None:
        if path not in self._digests:
            self._digests[path] = super().file_hexdigest(path)
        return self._digests[path]

    # -- Asset caching -----------------------------------------------------

    def cache_key_for(self, filename: str, *, bundle: bool) -> str:
        """Key for both tiers: version digest, filename, file digest, bundle flag."""
        return (
            f"{self._version_digest}:asset:{filename}:"
            f"{self.file_hexdigest(filename)}:{'1' if bundle else '0'}"
        )

    def _build_asset(self, filename: str, *, bundle: bool) -> Asset:
        key = self.cache_key_for(filename, bundle=bundle)

        asset = self._memory.get(key)
        if asset is not None:
            logger.debug("Memory cache hit for %s", key)
            return asset

        asset = self._load_persisted(key)
        if asset is None:
            asset = super()._build_asset(filename, bundle=bundle)
            self._cache.set(key, encode_asset(asset))
            logger.debug("Cached %r under %s", asset, key)

        self._memory.set(key, asset)
        return asset

    def _load_persisted(self, key: str) -> Asset | None:
        """Return the persisted asset for *key* if it is still valid."""
        data = self._cache.get(key)
        if data is None:
            return None
        try:
            payload = load_payload(data)
        except UnserializeError as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

        if self.dependencies_hexdigest(payload.dependency_paths) != payload.dependency_digest:
            logger.info("Dependencies of %s changed; rebuilding", payload.filename)
            return None

        try:
            asset = decode_asset(self, payload)
        except UnserializeError as exc:
            logger.info("Cached %s is stale (%s); rebuilding", payload.filename, exc)
            return None
        logger.debug("Persisted cache hit for %s", key)
        return asset
