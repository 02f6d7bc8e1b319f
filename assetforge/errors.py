"""Exception hierarchy for the asset pipeline.

Every error derives from a standard library base so callers can catch the
broad category (``RuntimeError`` or ``TypeError``) without
importing this module.
"""

from __future__ import annotations


class AssetError(RuntimeError):
    """Base class for asset pipeline failures."""


class PipelineError(AssetError):
    """Raised when a processor returns a value the pipeline cannot merge."""


class FileOutsidePathsError(AssetError):
    """Raised when a filename is not under any configured search path."""


class CircularDependencyError(AssetError):
    """Raised when an asset requires itself, directly or transitively."""


class UnserializeError(AssetError):
    """Raised when a persisted asset payload cannot be reconstructed."""


class StaleDependencyError(UnserializeError):
    """Raised when a decoded asset no longer matches its live dependencies."""


class UnsupportedValueError(TypeError):
    """Raised when the digest utility is handed a value it cannot hash."""


class ImmutabilityViolation(TypeError):
    """Raised when a mutation is attempted on a cached or frozen view."""
