"""
Durable key/value backend for the store document.

Each key maps to one JSON file under the data directory. Writes go to a
sibling temp file first and are swapped in with ``os.replace`` so a reader
never observes a half-written document.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from ganimart.utils.config import data_dir
from ganimart.utils.logger import get_logger

logger = get_logger()

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _file_name(key: str) -> str:
    safe = _UNSAFE_KEY_CHARS.sub("_", key.strip()) or "store"
    return f"{safe}.json"


class FileBackend:
    """Local-disk storage addressed by opaque keys."""

    def __init__(self, directory: Path | None = None) -> None:
        self._dir = Path(directory) if directory is not None else data_dir()

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / _file_name(key)

    def read(self, key: str) -> str | None:
        """Return the stored text for `key`, or None if absent or unreadable."""
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.warning("Store read failed for %s: %s", path, e)
            return None

    def write(self, key: str, text: str) -> None:
        """Replace the text stored under `key`. Raises OSError if the disk refuses."""
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)
