"""Built-in processors shipped with assetforge."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from assetforge.models.processing import ProcessorInput

if TYPE_CHECKING:
    from assetforge.core.environment import Environment

_BLANK_RE = re.compile(r"\A\s*\Z")
_TERMINATED_RE = re.compile(r";\s*\Z")
_CHARSET_RE = re.compile(r'^@charset "[^"]+";$', re.MULTILINE)


def safety_colons(envelope: ProcessorInput) -> str:
    """Terminate a script with ``;`` so concatenation can't merge statements."""
    data = envelope.data
    if _BLANK_RE.match(data) or _TERMINATED_RE.search(data):
        return data
    return f"{data};\n"


def charset_normalizer(envelope: ProcessorInput) -> str:
    """Hoist the first ``@charset`` rule of a bundle to the top; drop the rest."""
    charset: str | None = None

    def strip(match: re.Match[str]) -> str:
        nonlocal charset
        if charset is None:
            charset = match.group(0)
        return ""

    filtered = _CHARSET_RE.sub(strip, envelope.data)
    if charset is None:
        return envelope.data
    return f"{charset}\n{filtered}"


def register_defaults(environment: Environment) -> None:
    """Register the built-in processors on *environment*."""
    environment.register_postprocessor("application/javascript", safety_colons)
    environment.register_bundle_processor("text/css", charset_normalizer)
