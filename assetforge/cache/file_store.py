"""Filesystem-backed persisted cache tier.

Storage layout: {base_path}/{sha256[0:2]}/{sha256[2:4]}/{sha256}.json where
sha256 is the digest of the cache key. Values are JSON documents.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from assetforge.core.hasher import sha256_hex

logger = logging.getLogger(__name__)


class FileStore:
    """JSON file per key, written atomically.

    A reader never sees a partially written entry: values are written to a
    temporary file in the same directory and moved into place. Unreadable
    entries are reported and treated as missing.

    Parameters
    ----------
    base_path:
        Root directory for cache entries. Created if it does not exist.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def _entry_path(self, key: str) -> Path:
        digest = sha256_hex(key.encode("utf-8"))
        return self._base / digest[:2] / digest[2:4] / f"{digest}.json"

    def get(self, key: str) -> Any | None:
        path = self._entry_path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            document = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt cache entry %s", path)
            return None
        if not isinstance(document, dict) or document.get("key") != key:
            logger.warning("Ignoring cache entry %s written for another key", path)
            return None
        return document.get("value")

    def set(self, key: str, value: Any) -> Any:
        path = self._entry_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps({"key": key, "value": value}, sort_keys=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote cache entry %s", path)
        return value

    def exists(self, key: str) -> bool:
        return self._entry_path(key).exists()
