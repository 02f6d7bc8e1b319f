"""Deterministic hashing helpers for cache keys and content addressing.

``hexdigest`` walks a nested JSON-like value (strings, numbers, booleans,
``None``, lists/tuples, mappings) and feeds it into a streaming hash. Each
node contributes a variant marker followed by its content. Mapping pairs are
hashed independently and mixed in sorted order, so two mappings with the same
items produce the same digest regardless of insertion order. Sequences and
mappings record their size, so nesting boundaries are part of the digest.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any

from assetforge.errors import UnsupportedValueError

DEFAULT_ALGORITHM = "sha1"


def new_digest(algorithm: str = DEFAULT_ALGORITHM) -> Any:
    """Return a fresh ``hashlib`` object for *algorithm*."""
    return hashlib.new(algorithm)


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def bytes_hexdigest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the hex digest of raw bytes using *algorithm*."""
    return hashlib.new(algorithm, data).hexdigest()


def hexdigest(
    obj: Any,
    digest: Any | None = None,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Hash a nested JSON-like value and return the hex digest.

    Parameters
    ----------
    obj:
        The value to hash.
    digest:
        Optional ``hashlib`` object to update in place. A new one using
        *algorithm* is created when omitted.

    Raises
    ------
    UnsupportedValueError
        If *obj* (or anything nested inside it) is not a supported variant.
    """
    if digest is None:
        digest = hashlib.new(algorithm)
    _update(digest, obj)
    return digest.hexdigest()


def _mix(digest: Any, marker: str, content: bytes | None = None) -> None:
    digest.update(marker.encode("ascii"))
    if content is not None:
        # Length prefix marks where each node ends.
        digest.update(f":{len(content)}:".encode("ascii"))
        digest.update(content)


def _update(digest: Any, obj: Any) -> None:
    # bool is an int subclass, so it must be matched first.
    if obj is None or isinstance(obj, bool):
        _mix(digest, repr(obj))
    elif isinstance(obj, str):
        _mix(digest, "str", obj.encode("utf-8"))
    elif isinstance(obj, int):
        _mix(digest, "int", int.__repr__(obj).encode("ascii"))
    elif isinstance(obj, float):
        _mix(digest, "float", float.__repr__(obj).encode("ascii"))
    elif isinstance(obj, (list, tuple)):
        _mix(digest, "list", str(len(obj)).encode("ascii"))
        for element in obj:
            _update(digest, element)
    elif isinstance(obj, Mapping):
        _mix(digest, "dict", str(len(obj)).encode("ascii"))
        pair_digests = sorted(
            hexdigest([key, value], algorithm=digest.name)
            for key, value in obj.items()
        )
        for pair_digest in pair_digests:
            digest.update(pair_digest.encode("ascii"))
    else:
        raise UnsupportedValueError(f"can't convert {obj!r} into a digest")
