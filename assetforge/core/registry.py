"""Processor registry — ordered processors per phase and content type.

The registry is an explicit value owned by an ``Environment``. Cached views
receive a frozen snapshot, so nothing registered after the view was created
can change what it builds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, overload

from assetforge.core.mime import normalize_extension
from assetforge.errors import ImmutabilityViolation
from assetforge.models.processing import (
    EngineEntry,
    LegacyBufferProcessor,
    ProcessorEntry,
    ProcessorPhase,
    StructuredProcessor,
)

logger = logging.getLogger(__name__)


def _callable_name(func: Callable[..., Any]) -> str:
    module = getattr(func, "__module__", None) or type(func).__module__
    qualname = getattr(func, "__qualname__", None) or type(func).__qualname__
    return f"{module}.{qualname}"


def wrap_processor(
    processor: Any,
    func: Callable[[Any, str], str] | None = None,
) -> ProcessorEntry:
    """Normalize a registration argument into a ``ProcessorEntry``.

    ``wrap_processor(callable)`` produces a ``StructuredProcessor``.
    ``wrap_processor("label", func)`` produces a ``LegacyBufferProcessor``
    for a two-argument ``func(context, data)``.
    """
    if func is not None:
        label = processor if isinstance(processor, str) else _callable_name(processor)
        return LegacyBufferProcessor(
            label=label,
            name=LegacyBufferProcessor.name_for(label),
            func=func,
        )
    if isinstance(processor, (StructuredProcessor, LegacyBufferProcessor)):
        return processor
    if callable(processor):
        return StructuredProcessor(name=_callable_name(processor), func=processor)
    raise TypeError(f"processor must be callable, got {type(processor).__name__}")


class ProcessorRegistry:
    """Ordered processor lists for the pre, post and bundle phases, plus engines.

    Parameters
    ----------
    frozen:
        When ``True`` every mutator raises ``ImmutabilityViolation``. Use
        ``snapshot()`` rather than passing this directly.

    Examples
    --------
    >>> registry = ProcessorRegistry()
    >>> entry = registry.register(
    ...     ProcessorPhase.POST, "text/css", "upcase", lambda ctx, data: data.upper()
    ... )
    >>> entry.name
    'legacy-buffer-processor (upcase)'
    >>> registry.unregister(ProcessorPhase.POST, "text/css", "upcase")
    True
    """

    def __init__(self, *, frozen: bool = False) -> None:
        self._frozen = frozen
        self._processors: dict[ProcessorPhase, dict[str, list[ProcessorEntry]]] = {
            phase: {} for phase in ProcessorPhase
        }
        self._engines: dict[str, EngineEntry] = {}

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ImmutabilityViolation("can't modify a frozen processor registry")

    # -- Registration -------------------------------------------------------

    def register(
        self,
        phase: ProcessorPhase | str,
        content_type: str,
        processor: Any,
        func: Callable[[Any, str], str] | None = None,
    ) -> ProcessorEntry:
        """Append a processor to the end of *content_type*'s list for *phase*.

        Processors of one phase run in registration order, so a later
        processor sees the output of earlier ones.

        Returns
        -------
        ProcessorEntry
            The stored entry (the wrapper, for legacy shorthand processors).
        """
        self._check_mutable()
        phase = ProcessorPhase(phase)
        entry = wrap_processor(processor, func)
        self._processors[phase].setdefault(content_type, []).append(entry)
        logger.debug("Registered %s processor %s for %s", phase.value, entry.name, content_type)
        return entry

    def unregister(
        self,
        phase: ProcessorPhase | str,
        content_type: str,
        processor: Any,
    ) -> bool:
        """Remove one processor from *content_type*'s list for *phase*.

        *processor* is either the registered entry, the callable it wraps,
        or the label a legacy shorthand processor was registered under.

        Returns
        -------
        bool
            ``True`` if an entry was found and removed, ``False`` otherwise.
        """
        self._check_mutable()
        phase = ProcessorPhase(phase)
        entries = self._processors[phase].get(content_type, [])

        if isinstance(processor, str):
            name = LegacyBufferProcessor.name_for(processor)
            matches = (
                i for i, e in enumerate(entries)
                if isinstance(e, LegacyBufferProcessor) and e.name == name
            )
        else:
            matches = (
                i for i, e in enumerate(entries)
                if e is processor or e.func is processor
            )

        index = next(matches, None)
        if index is None:
            logger.warning(
                "Cannot unregister %r: not a %s processor for %s.",
                processor, phase.value, content_type,
            )
            return False
        removed = entries.pop(index)
        logger.debug("Unregistered %s processor %s for %s", phase.value, removed.name, content_type)
        return True

    def register_engine(
        self,
        extension: str,
        processor: Any,
        *,
        mime_type: str | None = None,
    ) -> EngineEntry:
        """Bind a template engine to a filename extension.

        *mime_type* is the engine's default output type, used when a file has
        no format extension of its own (``foo.coffee`` rather than
        ``foo.js.coffee``).
        """
        self._check_mutable()
        extension = normalize_extension(extension)
        entry = EngineEntry(
            extension=extension,
            processor=wrap_processor(processor),
            mime_type=mime_type,
        )
        self._engines[extension] = entry
        logger.debug("Registered engine %s for %s", entry.processor.name, extension)
        return entry

    # -- Lookup -------------------------------------------------------------

    @overload
    def processors(self, phase: ProcessorPhase | str, content_type: str) -> list[ProcessorEntry]: ...

    @overload
    def processors(
        self, phase: ProcessorPhase | str, content_type: None = None
    ) -> dict[str, list[ProcessorEntry]]: ...

    def processors(
        self,
        phase: ProcessorPhase | str,
        content_type: str | None = None,
    ) -> list[ProcessorEntry] | dict[str, list[ProcessorEntry]]:
        """Return a copy of the processors for *phase*.

        With *content_type*, a list for that type; without, a mapping of every
        content type to a copied list.
        """
        by_type = self._processors[ProcessorPhase(phase)]
        if content_type is not None:
            return list(by_type.get(content_type, []))
        return {ct: list(entries) for ct, entries in by_type.items()}

    def engine(self, extension: str) -> EngineEntry | None:
        return self._engines.get(normalize_extension(extension))

    def engines(self) -> dict[str, EngineEntry]:
        return dict(self._engines)

    # -- Snapshots ----------------------------------------------------------

    def snapshot(self) -> ProcessorRegistry:
        """Return a frozen copy that later registrations do not affect."""
        frozen = ProcessorRegistry(frozen=True)
        for phase, by_type in self._processors.items():
            frozen._processors[phase] = {ct: list(entries) for ct, entries in by_type.items()}
        frozen._engines = dict(self._engines)
        return frozen

    def fingerprint(self) -> dict[str, Any]:
        """Return a hashable description of everything registered.

        Feeds the environment version digest; entries are identified by name.
        """
        return {
            "processors": {
                phase.value: {
                    ct: [entry.name for entry in entries]
                    for ct, entries in by_type.items()
                }
                for phase, by_type in self._processors.items()
            },
            "engines": {
                ext: [entry.processor.name, entry.mime_type]
                for ext, entry in self._engines.items()
            },
        }
