"""Processor entries, pipeline envelopes and processor results."""

from __future__ import annotations

import os
from collections.abc import Callable
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator


class ProcessorPhase(str, Enum):
    """Where in the build a processor runs.

    * ``preprocess`` — before engines, on each source file.
    * ``postprocess`` — after engines, on each source file.
    * ``bundle`` — on the concatenated body of a bundle.
    """

    PRE = "preprocess"
    POST = "postprocess"
    BUNDLE = "bundle"


# ---------------------------------------------------------------------------
# Processor entries
# ---------------------------------------------------------------------------

class StructuredProcessor(BaseModel):
    """A processor called with the full ``ProcessorInput`` envelope.

    It may return a replacement buffer or a structured update.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    name: str
    func: Callable[..., Any]


class LegacyBufferProcessor(BaseModel):
    """A two-argument ``(context, data)`` shorthand processor.

    The return value is always treated as a replacement buffer. ``name`` is
    derived from ``label`` so the entry can be unregistered by label alone.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["legacy"] = "legacy"
    label: str
    name: str
    func: Callable[..., Any]

    @staticmethod
    def name_for(label: str) -> str:
        return f"legacy-buffer-processor ({label})"


ProcessorEntry = Union[StructuredProcessor, LegacyBufferProcessor]


class EngineEntry(BaseModel):
    """A template engine bound to a filename extension."""

    model_config = ConfigDict(frozen=True)

    extension: str  # ".coffee"
    processor: ProcessorEntry
    mime_type: str | None = None  # default output type when no format extension


# ---------------------------------------------------------------------------
# Envelope and results
# ---------------------------------------------------------------------------

class ProcessorInput(BaseModel):
    """The envelope handed to each processor.

    Built once per ``process()`` call; only ``data`` changes between stages.
    """

    model_config = ConfigDict(frozen=True)

    environment: Any
    cache: Any
    filename: str
    root_path: str | None
    logical_path: str  # without format extension
    content_type: str
    data: str


def _as_path_tuple(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, (str, os.PathLike)):
        return (os.fspath(value),)
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(os.fspath(v) if isinstance(v, os.PathLike) else v for v in value)
    return value


class ReplacementBuffer(BaseModel):
    """A processor result that only replaces ``data``."""

    model_config = ConfigDict(frozen=True)

    data: str


class StructuredUpdate(BaseModel):
    """A processor result that replaces ``data`` and grows the accumulators."""

    model_config = ConfigDict(frozen=True)

    data: str
    required_paths: tuple[str, ...] = ()
    stubbed_assets: tuple[str, ...] = ()
    dependency_paths: tuple[str, ...] = ()
    dependency_assets: tuple[str, ...] = ()

    @field_validator(
        "required_paths",
        "stubbed_assets",
        "dependency_paths",
        "dependency_assets",
        mode="before",
    )
    @classmethod
    def _coerce_paths(cls, value: Any) -> Any:
        return _as_path_tuple(value)


class ProcessResult(BaseModel):
    """Final data plus the four accumulated dependency collections."""

    model_config = ConfigDict(frozen=True)

    data: str
    required_paths: tuple[str, ...] = ()
    stubbed_assets: frozenset[str] = frozenset()
    dependency_paths: frozenset[str] = frozenset()
    dependency_assets: frozenset[str] = frozenset()
