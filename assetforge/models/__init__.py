"""assetforge data models — all Pydantic v2, all frozen (immutable)."""

from assetforge.models.assets import SCHEMA_VERSION, AssetPayload, DependencyPath
from assetforge.models.processing import (
    EngineEntry,
    LegacyBufferProcessor,
    ProcessorEntry,
    ProcessorInput,
    ProcessorPhase,
    ProcessResult,
    ReplacementBuffer,
    StructuredProcessor,
    StructuredUpdate,
)

__all__ = [
    # assets
    "SCHEMA_VERSION",
    "AssetPayload",
    "DependencyPath",
    # processing
    "ProcessorPhase",
    "StructuredProcessor",
    "LegacyBufferProcessor",
    "ProcessorEntry",
    "EngineEntry",
    "ProcessorInput",
    "ReplacementBuffer",
    "StructuredUpdate",
    "ProcessResult",
]
