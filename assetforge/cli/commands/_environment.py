"""Shared option handling: turn CLI flags into a configured ``Environment``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from assetforge.config import AssetConfig
from assetforge.core.environment import Environment


def build_environment(
    paths: list[Path] | None,
    root: Path | None,
    cache_backend: str | None,
    cache_path: Path | None,
) -> Environment:
    """Load ``AssetConfig`` with any CLI flags layered over env/.env values."""
    overrides: dict[str, Any] = {}
    if paths:
        overrides["paths"] = paths
    if root is not None:
        overrides["root"] = root
    if cache_backend is not None:
        overrides["cache_backend"] = cache_backend
    if cache_path is not None:
        overrides["cache_path"] = cache_path
    return Environment.from_config(AssetConfig(**overrides))
