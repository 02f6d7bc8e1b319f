"""The mutable, user-facing environment.

An ``Environment`` is configured once at startup: search paths, MIME types,
engines and processors. Every lookup goes through a fresh
``CachedEnvironment`` snapshot, so registrations made later never leak into a
build already in flight.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from assetforge.cache import MemoryStore, NullStore, open_store
from assetforge.cache.base import CacheStore
from assetforge.config import AssetConfig
from assetforge.core.asset import Asset
from assetforge.core.base import Base
from assetforge.core.cached_environment import CachedEnvironment
from assetforge.core.hasher import DEFAULT_ALGORITHM
from assetforge.core.mime import MimeTypes
from assetforge.core.registry import ProcessorRegistry
from assetforge.models.processing import EngineEntry, ProcessorEntry, ProcessorPhase
from assetforge.plugins.loader import load_plugins

logger = logging.getLogger(__name__)


class Environment(Base):
    """Search paths plus processor configuration plus a persisted cache.

    Parameters
    ----------
    root:
        Directory that relative search paths are resolved against.
    paths:
        Initial search paths, in lookup order.
    cache:
        Persisted cache tier. Defaults to a ``NullStore``.
    digest_algorithm:
        ``hashlib`` algorithm name for every digest the pipeline computes.
    version:
        Free-form string mixed into every cache key; bump it to invalidate.
    memory_cache_size:
        Capacity of each cached view's in-memory tier.

    Examples
    --------
    ::

        env = Environment("/srv/app", paths=["app/assets/javascripts"])
        env.register_postprocessor(
            "application/javascript", "strip", lambda ctx, data: data.strip()
        )
        asset = env.find_asset("application.js")
    """

    def __init__(
        self,
        root: str | Path = ".",
        *,
        paths: Iterable[str | Path] = (),
        cache: CacheStore | None = None,
        digest_algorithm: str = DEFAULT_ALGORITHM,
        version: str = "",
        memory_cache_size: int = 1000,
    ) -> None:
        self._root = os.path.abspath(os.fspath(root))
        self._paths = ()
        self._registry = ProcessorRegistry()
        self._mime_types = MimeTypes()
        self._cache = cache if cache is not None else NullStore()
        self._digest_algorithm = digest_algorithm
        self._version = version
        self._memory_cache_size = memory_cache_size
        self._version_digest: str | None = None
        self._init_building()
        for path in paths:
            self.append_path(path)

    @classmethod
    def from_config(cls, cfg: AssetConfig | None = None) -> Environment:
        """Build an environment from ``AssetConfig`` and load its plugins."""
        if cfg is None:
            from assetforge.config import config as cfg
        root = Path(cfg.root)
        cache_path = cfg.cache_path if cfg.cache_path.is_absolute() else root / cfg.cache_path
        environment = cls(
            root,
            paths=cfg.paths,
            cache=open_store(cfg.cache_backend, cache_path, max_size=cfg.memory_cache_size),
            digest_algorithm=cfg.digest_algorithm,
            version=cfg.version,
            memory_cache_size=cfg.memory_cache_size,
        )
        load_plugins(environment, cfg.plugins)
        return environment

    # -- Configuration -----------------------------------------------------

    @property
    def root(self) -> str:
        return self._root

    @property
    def memory_cache_size(self) -> int:
        return self._memory_cache_size

    @property
    def version(self) -> str:
        return self._version

    @version.setter
    def version(self, value: str) -> None:
        self._version = value
        self.expire_cache()

    @property
    def version_digest(self) -> str:
        if self._version_digest is None:
            self._version_digest = super().version_digest
        return self._version_digest

    def expire_cache(self) -> None:
        """Forget the memoized version digest after a configuration change."""
        self._version_digest = None

    # -- Search paths ------------------------------------------------------

    def _expand(self, path: str | Path) -> str:
        return os.path.normpath(os.path.join(self._root, os.fspath(path)))

    def append_path(self, path: str | Path) -> None:
        self._paths = (*self._paths, self._expand(path))
        self.expire_cache()

    def prepend_path(self, path: str | Path) -> None:
        self._paths = (self._expand(path), *self._paths)
        self.expire_cache()

    def clear_paths(self) -> None:
        self._paths = ()
        self.expire_cache()

    # -- MIME types and engines --------------------------------------------

    def register_mime_type(self, mime_type: str, extension: str) -> None:
        self._mime_types.register(mime_type, extension)
        self.expire_cache()

    def extension_for_mime_type(self, mime_type: str) -> str | None:
        return self._mime_types.extension_for(mime_type)

    def register_engine(
        self,
        extension: str,
        processor: Any,
        *,
        mime_type: str | None = None,
    ) -> EngineEntry:
        """Register a template engine for *extension*.

        *mime_type* is the engine's output type for files with no format
        extension of their own.
        """
        entry = self._registry.register_engine(extension, processor, mime_type=mime_type)
        self.expire_cache()
        return entry

    # -- Processors --------------------------------------------------------

    def _register(
        self,
        phase: ProcessorPhase,
        mime_type: str,
        processor: Any,
        func: Callable[[Any, str], str] | None,
    ) -> ProcessorEntry:
        entry = self._registry.register(phase, mime_type, processor, func)
        self.expire_cache()
        return entry

    def _unregister(self, phase: ProcessorPhase, mime_type: str, processor: Any) -> bool:
        removed = self._registry.unregister(phase, mime_type, processor)
        self.expire_cache()
        return removed

    def register_preprocessor(
        self,
        mime_type: str,
        processor: Any,
        func: Callable[[Any, str], str] | None = None,
    ) -> ProcessorEntry:
        """Register a preprocessor for *mime_type*.

        Pass a callable taking the ``ProcessorInput`` envelope, or a label
        plus a two-argument ``func(context, data)`` shorthand::

            env.register_preprocessor("text/css", "strip", lambda ctx, data: data.strip())
        """
        return self._register(ProcessorPhase.PRE, mime_type, processor, func)

    def register_postprocessor(
        self,
        mime_type: str,
        processor: Any,
        func: Callable[[Any, str], str] | None = None,
    ) -> ProcessorEntry:
        """Register a postprocessor for *mime_type*; see ``register_preprocessor``."""
        return self._register(ProcessorPhase.POST, mime_type, processor, func)

    def register_bundle_processor(
        self,
        mime_type: str,
        processor: Any,
        func: Callable[[Any, str], str] | None = None,
    ) -> ProcessorEntry:
        """Register a processor that runs on concatenated bundles of *mime_type*."""
        return self._register(ProcessorPhase.BUNDLE, mime_type, processor, func)

    def unregister_preprocessor(self, mime_type: str, processor: Any) -> bool:
        return self._unregister(ProcessorPhase.PRE, mime_type, processor)

    def unregister_postprocessor(self, mime_type: str, processor: Any) -> bool:
        return self._unregister(ProcessorPhase.POST, mime_type, processor)

    def unregister_bundle_processor(self, mime_type: str, processor: Any) -> bool:
        return self._unregister(ProcessorPhase.BUNDLE, mime_type, processor)

    def preprocessors(self, mime_type: str | None = None) -> Any:
        return self._registry.processors(ProcessorPhase.PRE, mime_type)

    def postprocessors(self, mime_type: str | None = None) -> Any:
        return self._registry.processors(ProcessorPhase.POST, mime_type)

    def bundle_processors(self, mime_type: str | None = None) -> Any:
        return self._registry.processors(ProcessorPhase.BUNDLE, mime_type)

    # -- Lookup ------------------------------------------------------------

    def cached(self) -> CachedEnvironment:
        """Return an immutable, caching snapshot of this environment."""
        return CachedEnvironment(self)

    def find_asset(self, path: str | Path, *, bundle: bool = True) -> Asset | None:
        """Find *path* through a fresh cached snapshot."""
        return self.cached().find_asset(path, bundle=bundle)

    def new_memory_store(self) -> MemoryStore:
        return MemoryStore(self._memory_cache_size)
