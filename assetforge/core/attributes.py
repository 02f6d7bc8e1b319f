"""Filename-derived attributes: extensions, content type, logical path.

``AssetAttributes`` answers every question about a source file that can be
answered from its name and the environment's MIME and engine tables, without
touching the file contents.
"""

from __future__ import annotations

import os
import posixpath
import re
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from assetforge.core.mime import DEFAULT_MIME_TYPE
from assetforge.errors import FileOutsidePathsError
from assetforge.models.processing import EngineEntry, ProcessorEntry, ProcessorPhase

if TYPE_CHECKING:
    from assetforge.core.base import Base

_EXTENSION_RE = re.compile(r"\.[^.]+")


class AssetAttributes:
    """Attributes of *filename* as seen by *environment*.

    Examples
    --------
    For an environment with a ``.coffee`` engine registered::

        attrs = environment.attributes_for("/app/assets/application.js.coffee")
        attrs.extensions          # ['.js', '.coffee']
        attrs.format_extension    # '.js'
        attrs.engine_extensions   # ['.coffee']
        attrs.content_type        # 'application/javascript'
    """

    def __init__(self, environment: Base, filename: str | Path) -> None:
        self.environment = environment
        self.filename = os.fspath(filename)
        self.basename = os.path.basename(self.filename)

    @cached_property
    def extensions(self) -> list[str]:
        """Every ``.ext`` in the basename, in order."""
        return _EXTENSION_RE.findall(self.basename)

    @cached_property
    def format_extension(self) -> str | None:
        """The last extension that is a known MIME type and not an engine."""
        for extension in reversed(self.extensions):
            if (
                self.environment.mime_types.get(extension)
                and self.environment.registry.engine(extension) is None
            ):
                return extension
        return None

    @cached_property
    def engine_extensions(self) -> list[str]:
        """Engine extensions after the format extension, in filename order."""
        extensions = self.extensions
        if self.format_extension is not None:
            offset = extensions.index(self.format_extension)
            extensions = extensions[offset + 1:]
        return [ext for ext in extensions if self.environment.registry.engine(ext) is not None]

    @cached_property
    def engines(self) -> list[EngineEntry]:
        registry = self.environment.registry
        return [registry.engine(ext) for ext in self.engine_extensions]  # type: ignore[misc]

    @cached_property
    def content_type(self) -> str:
        """MIME type of the processed output."""
        if self.format_extension is not None:
            mime_type = self.environment.mime_types.get(self.format_extension)
            if mime_type:
                return mime_type
        return self._engine_content_type or DEFAULT_MIME_TYPE

    @cached_property
    def logical_path(self) -> str:
        """Path relative to the containing search root, engines stripped.

        Raises
        ------
        FileOutsidePathsError
            If the file is not under any search path.
        """
        root_path = self.environment.root_path_for(self.filename)
        if root_path is None:
            raise FileOutsidePathsError(
                f"{self.filename} isn't in paths: {', '.join(self.environment.paths)}"
            )
        relative = Path(os.path.relpath(self.filename, root_path)).as_posix()
        dirname, basename = posixpath.split(relative)
        for extension in self.engine_extensions:
            head, sep, tail = basename.rpartition(extension)
            if sep:
                basename = head + tail
        if self.format_extension is None:
            basename += self._engine_format_extension or ""
        return posixpath.join(dirname, basename) if dirname else basename

    @property
    def processors(self) -> list[ProcessorEntry]:
        """Preprocessors, then engines innermost-last, then postprocessors."""
        registry = self.environment.registry
        content_type = self.content_type
        return (
            registry.processors(ProcessorPhase.PRE, content_type)
            + [engine.processor for engine in reversed(self.engines)]
            + registry.processors(ProcessorPhase.POST, content_type)
        )

    @property
    def _engine_content_type(self) -> str | None:
        # Engines run outermost extension first; the innermost one decides the output.
        for engine in self.engines:
            if engine.mime_type:
                return engine.mime_type
        return None

    @property
    def _engine_format_extension(self) -> str | None:
        content_type = self._engine_content_type
        if content_type is None:
            return None
        return self.environment.mime_types.extension_for(content_type)

    def __repr__(self) -> str:
        return f"<AssetAttributes filename={self.filename!r}>"
