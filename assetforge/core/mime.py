"""MIME type table for format extensions."""

from __future__ import annotations

from assetforge.errors import ImmutabilityViolation

DEFAULT_MIME_TYPE = "application/octet-stream"

DEFAULT_MIME_TYPES: dict[str, str] = {
    ".css": "text/css",
    ".csv": "text/csv",
    ".gif": "image/gif",
    ".html": "text/html",
    ".ico": "image/vnd.microsoft.icon",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".xml": "application/xml",
}


def normalize_extension(extension: str) -> str:
    """Prepend a leading ``.`` to *extension* if it is missing.

    >>> normalize_extension("js")
    '.js'
    >>> normalize_extension(".css")
    '.css'
    """
    return extension if extension.startswith(".") else f".{extension}"


class MimeTypes:
    """Extension to MIME type table with a reverse lookup."""

    def __init__(
        self,
        mapping: dict[str, str] | None = None,
        *,
        frozen: bool = False,
    ) -> None:
        self._frozen = frozen
        self._by_extension: dict[str, str] = dict(
            DEFAULT_MIME_TYPES if mapping is None else mapping
        )

    def register(self, mime_type: str, extension: str) -> None:
        if self._frozen:
            raise ImmutabilityViolation("can't modify a frozen MIME type table")
        self._by_extension[normalize_extension(extension)] = mime_type

    def get(self, extension: str) -> str | None:
        return self._by_extension.get(normalize_extension(extension))

    def extension_for(self, mime_type: str) -> str | None:
        """Return the first extension registered for *mime_type*."""
        for extension, registered in self._by_extension.items():
            if registered == mime_type:
                return extension
        return None

    def copy(self, *, frozen: bool = False) -> MimeTypes:
        return MimeTypes(self._by_extension, frozen=frozen)

    def as_dict(self) -> dict[str, str]:
        return dict(self._by_extension)
