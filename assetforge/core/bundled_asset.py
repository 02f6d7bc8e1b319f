"""Bundled assets — a processed asset concatenated with everything it requires.

A bundle inherits ``required_assets``, ``dependency_paths``,
``dependency_digest`` and ``mtime`` from the processed asset for the same
file. Only the body differs: the required bodies are joined in link order and
run through the bundle processors for the content type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from assetforge.core.asset import Asset
from assetforge.core.hasher import bytes_hexdigest
from assetforge.errors import StaleDependencyError, UnserializeError
from assetforge.models.assets import AssetPayload
from assetforge.models.processing import ProcessorPhase

if TYPE_CHECKING:
    from assetforge.core.base import Base

logger = logging.getLogger(__name__)


class BundledAsset(Asset):
    """Concatenation of a processed asset's required closure."""

    kind: ClassVar[str] = "bundled"

    def __init__(self, *, source: str, processed_asset: Asset, **attrs: Any) -> None:
        super().__init__(**attrs)
        self._freeze(_source=source, processed_asset=processed_asset)

    @property
    def source(self) -> str:
        return self._source

    @property
    def required_assets(self) -> tuple[Asset, ...]:
        return self.processed_asset.required_assets

    @property
    def dependency_assets(self) -> tuple[Asset, ...]:
        """Assets whose bodies were concatenated into this bundle."""
        return self.required_assets

    def to_a(self) -> list[Asset]:
        """Expand the bundle into its parts."""
        return list(self.required_assets)

    @staticmethod
    def _processed_asset(environment: Base, filename: str) -> Asset:
        asset = environment.find_asset(filename, bundle=False)
        if asset is None:
            raise UnserializeError(f"processed asset for {filename} is missing")
        return asset

    @classmethod
    def build(cls, environment: Base, logical_path: str, filename: str) -> BundledAsset:
        processed = cls._processed_asset(environment, filename)

        source = "".join(asset.source for asset in processed.required_assets)
        source = environment.process(
            environment.registry.processors(ProcessorPhase.BUNDLE, processed.content_type),
            filename,
            source,
        ).data

        body = source.encode("utf-8")
        logger.debug(
            "Bundled %s from %d asset(s), %d bytes",
            logical_path, len(processed.required_assets), len(body),
        )
        return cls(
            logical_path=logical_path,
            filename=filename,
            content_type=processed.content_type,
            mtime=processed.mtime,
            length=len(body),
            digest=bytes_hexdigest(body, environment.digest_algorithm),
            dependency_paths=processed.dependency_paths,
            dependency_digest=processed.dependency_digest,
            source=source,
            processed_asset=processed,
        )

    def to_payload(self) -> AssetPayload:
        return super().to_payload().model_copy(update={"source": self.source})

    @classmethod
    def from_payload(cls, environment: Base, payload: AssetPayload) -> BundledAsset:
        """Rebuild a bundle from its payload.

        Raises
        ------
        StaleDependencyError
            If the live processed asset's dependency digest no longer matches
            the one recorded in the payload.
        """
        if payload.source is None:
            raise UnserializeError(f"bundled asset payload for {payload.filename} has no source")
        processed = cls._processed_asset(environment, payload.filename)
        if processed.dependency_digest != payload.dependency_digest:
            raise StaleDependencyError("processed asset belongs to a stale environment")
        return cls(
            source=payload.source,
            processed_asset=processed,
            **cls._attrs_from_payload(payload),
        )

