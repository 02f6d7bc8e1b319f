"""Shared lookup, build and digest logic for environments.

``Base`` holds the read-only half of an environment: search paths, the
processor registry, the MIME table and the persisted cache handle. It knows
how to resolve a path, stat and digest files, run the pipeline and build an
asset without any caching. ``Environment`` adds mutators; ``CachedEnvironment``
adds the two cache tiers.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any

from assetforge.cache.base import CacheStore
from assetforge.core.asset import Asset, ProcessedAsset, StaticAsset
from assetforge.core.attributes import AssetAttributes
from assetforge.core.bundled_asset import BundledAsset
from assetforge.core.hasher import bytes_hexdigest, hexdigest
from assetforge.core.mime import MimeTypes
from assetforge.core.processing import process
from assetforge.core.registry import ProcessorRegistry
from assetforge.errors import CircularDependencyError
from assetforge.models.assets import DependencyPath
from assetforge.models.processing import ProcessorEntry, ProcessResult

logger = logging.getLogger(__name__)


class Base:
    """Common behaviour of ``Environment`` and ``CachedEnvironment``."""

    _paths: tuple[str, ...]
    _registry: ProcessorRegistry
    _mime_types: MimeTypes
    _cache: CacheStore
    _digest_algorithm: str
    _version: str

    def _init_building(self) -> None:
        self._local = threading.local()

    @property
    def _building(self) -> set[tuple[str, bool]]:
        """Builds in progress on the calling thread."""
        building = getattr(self._local, "building", None)
        if building is None:
            building = self._local.building = set()
        return building

    # -- Read-only configuration -------------------------------------------

    @property
    def paths(self) -> tuple[str, ...]:
        """Search roots, in lookup order."""
        return self._paths

    @property
    def registry(self) -> ProcessorRegistry:
        return self._registry

    @property
    def mime_types(self) -> MimeTypes:
        return self._mime_types

    @property
    def cache(self) -> CacheStore:
        """The persisted cache tier."""
        return self._cache

    @property
    def digest_algorithm(self) -> str:
        return self._digest_algorithm

    @property
    def version(self) -> str:
        return self._version

    def fingerprint(self) -> dict[str, Any]:
        """Everything that can change what a build produces, as a hashable value."""
        return {
            "version": self._version,
            "digest_algorithm": self._digest_algorithm,
            "paths": list(self._paths),
            "mime_types": self._mime_types.as_dict(),
            **self._registry.fingerprint(),
        }

    @property
    def version_digest(self) -> str:
        """Digest of ``fingerprint()``; prefixes every cache key."""
        return hexdigest(self.fingerprint(), algorithm=self._digest_algorithm)

    # -- Filename attributes -----------------------------------------------

    def attributes_for(self, filename: str | Path) -> AssetAttributes:
        return AssetAttributes(self, filename)

    def content_type_of(self, filename: str | Path) -> str:
        return self.attributes_for(filename).content_type

    def root_path_for(self, filename: str | Path) -> str | None:
        """Return the first search root containing *filename*, if any."""
        filename = os.fspath(filename)
        for root in self._paths:
            if filename.startswith(root.rstrip(os.sep) + os.sep):
                return root
        return None

    # -- Filesystem --------------------------------------------------------

    def stat(self, path: str) -> os.stat_result | None:
        try:
            return os.stat(path)
        except FileNotFoundError:
            return None

    def entries(self, path: str) -> list[str]:
        """Sorted directory entries of *path*, or ``[]`` if it is not a directory."""
        try:
            return sorted(os.listdir(path))
        except (FileNotFoundError, NotADirectoryError):
            return []

    def file_hexdigest(self, path: str) -> str | None:
        """Digest of a file's bytes, or of a directory's entry list.

        Returns ``None`` if *path* does not exist.
        """
        stat = self.stat(path)
        if stat is None:
            return None
        if os.path.isdir(path):
            return hexdigest(self.entries(path), algorithm=self._digest_algorithm)
        return bytes_hexdigest(Path(path).read_bytes(), self._digest_algorithm)

    def read_source(self, filename: str) -> str:
        return Path(filename).read_text(encoding="utf-8")

    # -- Dependency digests ------------------------------------------------

    def dependency_path_for(self, path: str) -> DependencyPath | None:
        """Observe *path* now: its mtime and content digest."""
        stat = self.stat(path)
        digest = self.file_hexdigest(path) if stat is not None else None
        if stat is None or digest is None:
            return None
        return DependencyPath(path=path, mtime=int(stat.st_mtime), digest=digest)

    def dependencies_digest(self, dependency_paths: tuple[DependencyPath, ...]) -> str:
        """Digest of recorded dependency tuples, independent of their order."""
        return hexdigest(
            sorted(d.as_list() for d in dependency_paths),
            algorithm=self._digest_algorithm,
        )

    def dependencies_hexdigest(self, dependency_paths: tuple[DependencyPath, ...]) -> str | None:
        """Recompute the dependency digest from the live filesystem.

        Returns ``None`` when any dependency has disappeared.
        """
        live: list[DependencyPath] = []
        for dependency in dependency_paths:
            current = self.dependency_path_for(dependency.path)
            if current is None:
                return None
            live.append(current)
        return self.dependencies_digest(tuple(live))

    # -- Pipeline ----------------------------------------------------------

    def process(
        self,
        processors: list[ProcessorEntry],
        filename: str | Path,
        data: str,
    ) -> ProcessResult:
        """Run *processors* over *data*; see ``assetforge.core.processing``."""
        return process(self, processors, filename, data)

    # -- Lookup ------------------------------------------------------------

    def resolve(self, path: str | Path) -> str | None:
        """Return the absolute filename for *path*, or ``None``.

        *path* is either an absolute filename or a logical path. A logical
        path matches a file whose own logical path equals it, so
        ``"app.js"`` finds ``app.js``, ``app.js.coffee`` or ``app.coffee``.
        """
        path = os.fspath(path)
        if os.path.isabs(path):
            stat = self.stat(path)
            return path if stat is not None and not os.path.isdir(path) else None

        for root in self._paths:
            candidate = os.path.join(root, path)
            stat = self.stat(candidate)
            if stat is not None and not os.path.isdir(candidate):
                return candidate

            dirname, basename = os.path.split(candidate)
            stem = basename.split(".", 1)[0]
            for entry in self.entries(dirname):
                if not entry.startswith(f"{stem}."):
                    continue
                filename = os.path.join(dirname, entry)
                if os.path.isdir(filename):
                    continue
                if self.attributes_for(filename).logical_path == Path(path).as_posix():
                    return filename
        return None

    def find_asset(self, path: str | Path, *, bundle: bool = True) -> Asset | None:
        """Find and build the asset for *path*.

        Returns ``None`` if nothing matches.
        """
        filename = self.resolve(path)
        if filename is None:
            logger.debug("No asset found for %s", path)
            return None
        return self._build_asset(filename, bundle=bundle)

    def _build_asset(self, filename: str, *, bundle: bool) -> Asset:
        """Build *filename* without consulting any cache."""
        key = (filename, bundle)
        if key in self._building:
            raise CircularDependencyError(f"{filename} has already been required")
        self._building.add(key)
        try:
            attributes = self.attributes_for(filename)
            logical_path = attributes.logical_path
            if not attributes.processors:
                asset: Asset = StaticAsset.build(self, logical_path, filename)
            elif bundle:
                asset = BundledAsset.build(self, logical_path, filename)
            else:
                asset = ProcessedAsset.build(self, logical_path, filename)
        finally:
            self._building.discard(key)
        logger.debug("Built %r", asset)
        return asset
