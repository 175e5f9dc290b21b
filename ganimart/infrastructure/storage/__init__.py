"""Durable document storage with versioned schema migrations."""

from ganimart.infrastructure.storage.backend import FileBackend
from ganimart.infrastructure.storage.store import Store

__all__ = ["FileBackend", "Store"]
