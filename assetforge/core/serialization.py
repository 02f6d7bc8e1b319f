"""Encode and decode assets for the persisted cache tier."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from assetforge.core.asset import Asset, ProcessedAsset, StaticAsset
from assetforge.core.bundled_asset import BundledAsset
from assetforge.errors import UnserializeError
from assetforge.models.assets import SCHEMA_VERSION, AssetPayload

if TYPE_CHECKING:
    from assetforge.core.base import Base

ASSET_KINDS: dict[str, type[Asset]] = {
    StaticAsset.kind: StaticAsset,
    ProcessedAsset.kind: ProcessedAsset,
    BundledAsset.kind: BundledAsset,
}


def encode_asset(asset: Asset) -> dict[str, Any]:
    """Return the JSON-ready persisted form of *asset*."""
    return asset.encode()


def load_payload(data: Any) -> AssetPayload:
    """Validate raw persisted data as an ``AssetPayload``.

    Raises
    ------
    UnserializeError
        If the data does not match the current schema.
    """
    if isinstance(data, AssetPayload):
        payload = data
    else:
        try:
            payload = AssetPayload.model_validate(data)
        except ValidationError as exc:
            raise UnserializeError(f"malformed asset payload: {exc}") from exc
    if payload.schema_version != SCHEMA_VERSION:
        raise UnserializeError(
            f"asset payload schema v{payload.schema_version} "
            f"does not match v{SCHEMA_VERSION}"
        )
    return payload


def decode_asset(environment: Base, data: Any) -> Asset:
    """Rebuild a live asset from its persisted form.

    Raises
    ------
    UnserializeError
        If the payload is malformed or from another schema version.
    StaleDependencyError
        If a bundle no longer matches its live processed asset.
    """
    payload = load_payload(data)
    return ASSET_KINDS[payload.kind].from_payload(environment, payload)  # type: ignore[attr-defined]
