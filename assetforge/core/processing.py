"""Pipeline executor — runs an ordered processor list over one file's data.

``process`` threads ``data`` through each processor and merges structured
results into four accumulators:

* ``required_paths`` — ordered; files whose bodies are bundled in.
* ``stubbed_assets`` — required files excluded from the bundle.
* ``dependency_paths`` — files watched for staleness but not concatenated.
* ``dependency_assets`` — assets whose dependency closure is merged in;
  always contains the processed file itself.

Accumulators only grow. The executor does not look processors up and has no
side effects; a processor that raises fails the whole call.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from assetforge.errors import PipelineError
from assetforge.models.processing import (
    LegacyBufferProcessor,
    ProcessorEntry,
    ProcessorInput,
    ProcessResult,
    ReplacementBuffer,
    StructuredProcessor,
    StructuredUpdate,
)

if TYPE_CHECKING:
    from assetforge.core.base import Base

logger = logging.getLogger(__name__)


def call_processor(
    entry: ProcessorEntry,
    envelope: ProcessorInput,
) -> ReplacementBuffer | StructuredUpdate:
    """Invoke *entry* and normalize its return value.

    Raises
    ------
    PipelineError
        If the processor returned anything other than a string, a
        ``ReplacementBuffer``, a ``StructuredUpdate`` or a mapping that
        validates as one.
    """
    if isinstance(entry, LegacyBufferProcessor):
        result = entry.func(envelope, envelope.data)
        if isinstance(result, str):
            return ReplacementBuffer(data=result)
    elif isinstance(entry, StructuredProcessor):
        result = entry.func(envelope)
        if isinstance(result, str):
            return ReplacementBuffer(data=result)
        if isinstance(result, (ReplacementBuffer, StructuredUpdate)):
            return result
        if isinstance(result, Mapping):
            try:
                return StructuredUpdate.model_validate(dict(result))
            except ValidationError as exc:
                raise PipelineError(
                    f"invalid processor result from {entry.name}: {exc}"
                ) from exc
    else:
        raise PipelineError(f"unknown processor entry: {type(entry).__name__}")

    raise PipelineError(f"invalid processor return type: {type(result).__name__}")


def process(
    environment: Base,
    processors: Iterable[ProcessorEntry],
    filename: str | Path,
    data: str,
) -> ProcessResult:
    """Run *processors* over *data* for *filename*.

    Parameters
    ----------
    environment:
        Supplies the search paths, cache handle and filename attributes
        placed in the envelope.
    processors:
        Already filtered for the phase and content type, in run order.
    filename:
        Absolute path of the file being processed.
    data:
        Initial buffer.
    """
    filename = os.fspath(filename)
    attributes = environment.attributes_for(filename)
    logical_path = attributes.logical_path

    envelope = ProcessorInput(
        environment=environment,
        cache=environment.cache,
        filename=filename,
        root_path=environment.root_path_for(filename),
        logical_path=os.path.splitext(logical_path)[0],
        content_type=attributes.content_type,
        data=data,
    )

    required_paths: list[str] = []
    stubbed_assets: set[str] = set()
    dependency_paths: set[str] = set()
    dependency_assets: set[str] = {filename}

    for entry in processors:
        result = call_processor(entry, envelope.model_copy(update={"data": data}))
        data = result.data
        if isinstance(result, StructuredUpdate):
            required_paths.extend(result.required_paths)
            stubbed_assets.update(result.stubbed_assets)
            dependency_paths.update(result.dependency_paths)
            dependency_assets.update(result.dependency_assets)

    logger.debug(
        "Processed %s: %d required, %d stubbed, %d dependency paths",
        filename, len(required_paths), len(stubbed_assets), len(dependency_paths),
    )
    return ProcessResult(
        data=data,
        required_paths=tuple(required_paths),
        stubbed_assets=frozenset(stubbed_assets),
        dependency_paths=frozenset(dependency_paths),
        dependency_assets=frozenset(dependency_assets),
    )
