"""Persisted asset models.

``AssetPayload`` is the only form an asset takes outside the process that
built it. The live asset classes in ``assetforge.core.asset`` convert to and
from it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

SCHEMA_VERSION = 1


class DependencyPath(BaseModel):
    """One file a build depended on, as observed at build time."""

    model_config = ConfigDict(frozen=True)

    path: str
    mtime: int
    digest: str

    def as_list(self) -> list[str | int]:
        return [self.path, self.mtime, self.digest]


class AssetPayload(BaseModel):
    """Serialized asset layout, versioned by ``schema_version``.

    ``source`` is present for processed and bundled assets; static assets
    are re-read from ``filename``. ``required_paths`` lists the filenames of
    a processed asset's required assets in link order.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: int = SCHEMA_VERSION
    kind: Literal["static", "processed", "bundled"]
    logical_path: str
    filename: str
    content_type: str
    mtime: int
    length: int
    digest: str
    dependency_paths: tuple[DependencyPath, ...] = ()
    dependency_digest: str = ""
    source: str | None = None
    required_paths: tuple[str, ...] = ()
