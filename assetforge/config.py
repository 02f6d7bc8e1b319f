"""Runtime configuration — env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
ASSETFORGE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AssetConfig(BaseSettings):
    """Asset pipeline configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export ASSETFORGE_PATHS='["app/assets/javascripts", "vendor/assets"]'
        export ASSETFORGE_CACHE_BACKEND=sqlite
        export ASSETFORGE_CACHE_PATH=/var/cache/assets.db

    Or via .env file::

        ASSETFORGE_LOG_LEVEL=DEBUG
        ASSETFORGE_VERSION=2026-10
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ASSETFORGE_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Lookup
    root: Path = Path(".")
    paths: list[Path] = []

    # Caching
    cache_backend: Literal["file", "sqlite", "memory", "null"] = "file"
    cache_path: Path = Path(".assetforge/cache")
    memory_cache_size: int = 1000

    # Cache identity: changing either invalidates every cached asset
    digest_algorithm: str = "sha1"
    version: str = ""

    # "module:function" entry points called with the environment
    plugins: list[str] = ["assetforge.processors:register_defaults"]

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from assetforge.config import config`
config = AssetConfig()
