"""Immutable asset values: static files and processed single files.

An asset is built once and never mutated. ``to_payload()`` produces the
``AssetPayload`` stored in the persisted cache tier; ``from_payload()``
rebuilds the live value against an environment.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from assetforge.core.hasher import bytes_hexdigest
from assetforge.errors import AssetError, ImmutabilityViolation, UnserializeError
from assetforge.models.assets import AssetPayload, DependencyPath
from assetforge.models.processing import ProcessResult

if TYPE_CHECKING:
    from assetforge.core.base import Base

logger = logging.getLogger(__name__)


class Asset:
    """Base class for every asset kind.

    Attributes
    ----------
    logical_path:
        Lookup key independent of the file's location, e.g. ``"app.js"``.
    filename:
        Absolute source path.
    content_type:
        MIME type of the final body.
    mtime:
        Latest modification time across the asset and its dependencies.
    length, digest:
        Byte length and hex digest of the final body.
    dependency_paths:
        Every file the build depended on, including the asset itself,
        sorted by path.
    dependency_digest:
        Digest of ``dependency_paths``; equal digests imply equal bodies.
    """

    kind: ClassVar[str] = "asset"

    def __init__(
        self,
        *,
        logical_path: str,
        filename: str,
        content_type: str,
        mtime: int,
        length: int,
        digest: str,
        dependency_paths: tuple[DependencyPath, ...] = (),
        dependency_digest: str = "",
    ) -> None:
        self._freeze(
            logical_path=logical_path,
            filename=filename,
            content_type=content_type,
            mtime=mtime,
            length=length,
            digest=digest,
            dependency_paths=tuple(dependency_paths),
            dependency_digest=dependency_digest,
        )

    def _freeze(self, **attrs: Any) -> None:
        for name, value in attrs.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutabilityViolation(f"can't modify immutable {type(self).__name__}")

    def __delattr__(self, name: str) -> None:
        raise ImmutabilityViolation(f"can't modify immutable {type(self).__name__}")

    # -- Body ---------------------------------------------------------------

    @property
    def source(self) -> str:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        return self.source.encode("utf-8")

    @property
    def required_assets(self) -> tuple[Asset, ...]:
        """Assets to concatenate when this asset is bundled, in link order."""
        return (self,)

    # -- Freshness ----------------------------------------------------------

    def is_fresh(self, environment: Base) -> bool:
        """Whether every dependency still matches what this build observed."""
        return environment.dependencies_hexdigest(self.dependency_paths) == self.dependency_digest

    # -- Serialization ------------------------------------------------------

    def to_payload(self) -> AssetPayload:
        return AssetPayload(
            kind=self.kind,  # type: ignore[arg-type]
            logical_path=self.logical_path,
            filename=self.filename,
            content_type=self.content_type,
            mtime=self.mtime,
            length=self.length,
            digest=self.digest,
            dependency_paths=self.dependency_paths,
            dependency_digest=self.dependency_digest,
        )

    def encode(self) -> dict[str, Any]:
        """Return the JSON-ready persisted form."""
        return self.to_payload().model_dump(mode="json")

    @classmethod
    def _attrs_from_payload(cls, payload: AssetPayload) -> dict[str, Any]:
        return {
            "logical_path": payload.logical_path,
            "filename": payload.filename,
            "content_type": payload.content_type,
            "mtime": payload.mtime,
            "length": payload.length,
            "digest": payload.digest,
            "dependency_paths": payload.dependency_paths,
            "dependency_digest": payload.dependency_digest,
        }

    # -- Value semantics ----------------------------------------------------

    def __str__(self) -> str:
        return self.source

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.filename == other.filename
            and self.digest == other.digest
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.filename, self.digest))

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} logical_path={self.logical_path!r} "
            f"filename={self.filename!r} digest={self.digest[:12]!r}>"
        )


class StaticAsset(Asset):
    """A file served as-is; its body is read from disk on demand."""

    kind: ClassVar[str] = "static"

    @classmethod
    def build(cls, environment: Base, logical_path: str, filename: str) -> StaticAsset:
        dependency = environment.dependency_path_for(filename)
        if dependency is None:
            raise FileNotFoundError(f"Asset source not found: {filename}")
        stat = environment.stat(filename)
        return cls(
            logical_path=logical_path,
            filename=filename,
            content_type=environment.content_type_of(filename),
            mtime=dependency.mtime,
            length=stat.st_size if stat is not None else 0,
            digest=dependency.digest,
            dependency_paths=(dependency,),
            dependency_digest=environment.dependencies_digest((dependency,)),
        )

    @classmethod
    def from_payload(cls, environment: Base, payload: AssetPayload) -> StaticAsset:
        return cls(**cls._attrs_from_payload(payload))

    def to_bytes(self) -> bytes:
        return Path(self.filename).read_bytes()

    @property
    def source(self) -> str:
        try:
            return self.to_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AssetError(f"{self.filename} is not UTF-8 text") from exc


class ProcessedAsset(Asset):
    """A single file run through preprocessors, engines and postprocessors.

    ``required_assets`` is the flattened closure of everything the file
    requires, with the asset itself in its link position. Only the other
    assets are held; the self reference is resolved on access.
    """

    kind: ClassVar[str] = "processed"

    def __init__(
        self,
        *,
        source: str,
        required_paths: tuple[str, ...],
        required: dict[str, Asset],
        **attrs: Any,
    ) -> None:
        super().__init__(**attrs)
        self._freeze(_source=source, required_paths=tuple(required_paths), _required=dict(required))

    @property
    def source(self) -> str:
        return self._source

    @property
    def required_assets(self) -> tuple[Asset, ...]:
        return tuple(
            self if path == self.filename else self._required[path]
            for path in self.required_paths
        )

    # -- Building -----------------------------------------------------------

    @classmethod
    def build(cls, environment: Base, logical_path: str, filename: str) -> ProcessedAsset:
        attributes = environment.attributes_for(filename)
        result = environment.process(
            attributes.processors,
            filename,
            environment.read_source(filename),
        )

        required = _resolve_required(environment, filename, result)
        dependency_paths = _collect_dependency_paths(
            environment, filename, result, [a for a in required.values() if a is not None]
        )
        source = result.data
        body = source.encode("utf-8")
        return cls(
            logical_path=logical_path,
            filename=filename,
            content_type=attributes.content_type,
            mtime=max(d.mtime for d in dependency_paths),
            length=len(body),
            digest=bytes_hexdigest(body, environment.digest_algorithm),
            dependency_paths=dependency_paths,
            dependency_digest=environment.dependencies_digest(dependency_paths),
            source=source,
            required_paths=tuple(required),
            required={path: asset for path, asset in required.items() if asset is not None},
        )

    # -- Serialization ------------------------------------------------------

    def to_payload(self) -> AssetPayload:
        return super().to_payload().model_copy(
            update={"source": self.source, "required_paths": self.required_paths}
        )

    @classmethod
    def from_payload(cls, environment: Base, payload: AssetPayload) -> ProcessedAsset:
        if payload.source is None:
            raise UnserializeError(f"processed asset payload for {payload.filename} has no source")
        required: dict[str, Asset] = {}
        for path in payload.required_paths:
            if path == payload.filename:
                continue
            asset = environment.find_asset(path, bundle=False)
            if asset is None:
                raise UnserializeError(f"{path} isn't in paths: {', '.join(environment.paths)}")
            required[path] = asset
        return cls(
            source=payload.source,
            required_paths=payload.required_paths,
            required=required,
            **cls._attrs_from_payload(payload),
        )


# ---------------------------------------------------------------------------
# Build helpers
# ---------------------------------------------------------------------------

def _expand_required(
    environment: Base,
    filename: str,
    paths: list[str] | tuple[str, ...],
) -> dict[str, Asset | None]:
    """Expand each path into its own required closure, first occurrence wins.

    ``None`` marks the asset under construction.
    """
    expanded: dict[str, Asset | None] = {}
    for path in paths:
        if path == filename:
            expanded.setdefault(filename, None)
            continue
        asset = environment.find_asset(path, bundle=False)
        if asset is None:
            raise FileNotFoundError(f"Required asset not found: {path} (from {filename})")
        for dependency in asset.required_assets:
            expanded.setdefault(dependency.filename, dependency)
    return expanded


def _resolve_required(
    environment: Base,
    filename: str,
    result: ProcessResult,
) -> dict[str, Asset | None]:
    required = _expand_required(environment, filename, [*result.required_paths, filename])
    if result.stubbed_assets:
        stubbed = _expand_required(environment, filename, sorted(result.stubbed_assets))
        for path in stubbed:
            required.pop(path, None)
        logger.debug("Stubbed %d asset(s) out of %s", len(stubbed), filename)
    return required


def _collect_dependency_paths(
    environment: Base,
    filename: str,
    result: ProcessResult,
    required_assets: list[Asset],
) -> tuple[DependencyPath, ...]:
    dependencies: dict[str, DependencyPath] = {}

    def add(path: str) -> None:
        dependency = environment.dependency_path_for(path)
        if dependency is None:
            raise FileNotFoundError(f"Dependency not found: {path} (from {filename})")
        dependencies[path] = dependency

    for path in sorted(result.dependency_paths):
        add(path)
    for path in sorted(result.dependency_assets):
        if path == filename:
            add(filename)
            continue
        asset = environment.find_asset(path, bundle=False)
        if asset is None:
            raise FileNotFoundError(f"Dependency asset not found: {path} (from {filename})")
        for dependency in asset.dependency_paths:
            dependencies.setdefault(dependency.path, dependency)
    # Required bodies are concatenated into bundles, so they are dependencies too.
    for asset in required_assets:
        for dependency in asset.dependency_paths:
            dependencies.setdefault(dependency.path, dependency)

    return tuple(sorted(dependencies.values(), key=lambda d: d.path))
