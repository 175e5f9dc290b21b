"""
Persistent store: owns the single durable document and its lifecycle.

Load order: read the durable key, merge the stored object over the defaults,
run pending migrations (persisting after each step), then validate into
``StoreDocument``. Anything unreadable along the way is treated as if nothing
had been stored and the demo seed is written instead.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator

from pydantic import ValidationError

from ganimart.domains.errors import StoreUnavailable
from ganimart.domains.models import StoreDocument
from ganimart.domains.seed import seed_document
from ganimart.infrastructure.storage.backend import FileBackend
from ganimart.infrastructure.storage.migrations import migrate
from ganimart.utils.config import store_key
from ganimart.utils.logger import get_logger

logger = get_logger()

SAVE_FAILED = "Could not save your changes. Please try again."


def _defaults() -> dict[str, Any]:
    # No "version" here: a stored document without one predates versioning.
    return {
        "products": [],
        "users": [],
        "reviews": [],
        "orders": [],
        "cart": [],
        "session": {"user_id": None},
        "seq": {"product": 1, "user": 1, "review": 1, "order": 1},
    }


def _merge_defaults(stored: dict[str, Any]) -> dict[str, Any]:
    """Stored values win; nested objects (session, seq) are merged key by key."""
    raw = _defaults()
    for key, value in stored.items():
        if isinstance(raw.get(key), dict) and isinstance(value, dict):
            raw[key] = {**raw[key], **value}
        else:
            raw[key] = value
    return raw


def _dumps(raw: dict[str, Any]) -> str:
    return json.dumps(raw, ensure_ascii=False, indent=2)


class Store:
    """
    Single owner of the store document.

    Only ``ganimart.services.storefront.Storefront`` mutates ``document``,
    and only inside ``transaction()``; everything else reads through
    ``snapshot()``.
    """

    def __init__(self, backend: FileBackend | None = None, key: str | None = None) -> None:
        self._backend = backend or FileBackend()
        self._key = key or store_key()
        self._doc: StoreDocument | None = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def document(self) -> StoreDocument:
        if self._doc is None:
            return self.load()
        return self._doc

    def snapshot(self) -> StoreDocument:
        return self.document.model_copy(deep=True)

    def load(self) -> StoreDocument:
        """Read, migrate and validate the durable document; seed it when unusable."""
        text = self._backend.read(self._key)
        if text is None:
            logger.info("No stored document under %r; seeding demo data", self._key)
            return self._seed()

        try:
            stored = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Stored document %r is not valid JSON (%s); reseeding", self._key, e)
            return self._seed()
        if not isinstance(stored, dict):
            logger.warning("Stored document %r is not an object; reseeding", self._key)
            return self._seed()

        raw = _merge_defaults(stored)
        try:
            migrated = migrate(raw, persist=self._write_raw)
            doc = StoreDocument.model_validate(migrated)
        except ValidationError as e:
            logger.warning("Stored document %r failed validation (%s); reseeding", self._key, e)
            return self._seed()
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Stored document %r could not be migrated (%s); reseeding", self._key, e)
            return self._seed()

        self._doc = doc
        logger.info(
            "Loaded store %r v%d: %d products, %d users, %d orders",
            self._key,
            doc.version,
            len(doc.products),
            len(doc.users),
            len(doc.orders),
        )
        return doc

    def save(self) -> None:
        """Write the whole in-memory document to the durable key."""
        self._write_raw(self.document.model_dump(mode="json"))

    @contextmanager
    def transaction(self) -> Iterator[StoreDocument]:
        """
        Yield the live document for mutation and persist it on exit.

        If the block raises, or the save fails, the in-memory document is
        restored to its state on entry. A failed save is re-raised as
        ``StoreUnavailable``.
        """
        before = self.document.model_copy(deep=True)
        try:
            yield self.document
            self.save()
        except OSError as e:
            self._doc = before
            logger.error("Saving store %r failed (%s); changes rolled back", self._key, e)
            raise StoreUnavailable(SAVE_FAILED) from e
        except Exception:
            self._doc = before
            raise

    def reset(self) -> StoreDocument:
        """Replace the durable document with the demo seed."""
        logger.info("Resetting store %r to demo seed", self._key)
        with self.transaction():
            self._doc = seed_document()
        return self.document

    def _seed(self) -> StoreDocument:
        self._doc = seed_document()
        try:
            self.save()
        except OSError as e:
            logger.error("Could not persist demo seed for %r (%s); running from memory", self._key, e)
        return self._doc

    def _write_raw(self, raw: dict[str, Any]) -> None:
        self._backend.write(self._key, _dumps(raw))
