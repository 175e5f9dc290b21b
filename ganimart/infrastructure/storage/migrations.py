"""
Forward-only schema migrations for the raw store document.

Each step is registered against the version it upgrades *from* and only
rewrites product entries. ``migrate`` applies the pending steps one at a time
in ascending order, bumps ``version`` by exactly one after each step and hands
the document to ``persist`` before moving on, so an interrupted run resumes
from the last persisted version.

Every step is idempotent on its own output: running it again over a
document it already produced changes nothing.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable
from urllib.parse import quote

from ganimart.domains.models import CURRENT_VERSION
from ganimart.domains.seed import local_asset, pinned_image
from ganimart.utils.logger import get_logger

logger = get_logger()

Document = dict[str, Any]
Step = Callable[[Document], Document]

_EXTERNAL = re.compile(r"^https?://")

_STEPS: dict[int, Step] = {}


def step(from_version: int) -> Callable[[Step], Step]:
    """Register a migration that upgrades `from_version` to `from_version + 1`."""

    def register(fn: Step) -> Step:
        if from_version in _STEPS:
            raise ValueError(f"Duplicate migration for version {from_version}")
        _STEPS[from_version] = fn
        return fn

    return register


def _map_products(doc: Document, fn: Callable[[dict[str, Any], int], dict[str, Any]]) -> Document:
    products = doc.get("products") or []
    return {**doc, "products": [fn(dict(p), idx) for idx, p in enumerate(products)]}


@step(1)
def reliable_image_source(doc: Document) -> Document:
    """Keep http(s) images; give everything else a seeded placeholder photo."""

    def fix(p: dict[str, Any], idx: int) -> dict[str, Any]:
        image = p.get("image")
        if not (isinstance(image, str) and image.startswith("http")):
            p["image"] = f"https://picsum.photos/seed/p{p.get('id')}/800/600"
        return p

    return _map_products(doc, fix)


@step(2)
def local_assets(doc: Document) -> Document:
    """Serve every product image from the bundled assets."""

    def fix(p: dict[str, Any], idx: int) -> dict[str, Any]:
        p["image"] = local_asset(idx)
        return p

    return _map_products(doc, fix)


@step(3)
def correct_asset_paths(doc: Document) -> Document:
    """Rewrite asset paths again; some v3 documents carried malformed ones."""
    return local_assets(doc)


@step(4)
def local_fallback_image(doc: Document) -> Document:
    """Backfill ``image_local`` and prefer an external photo as the primary image."""

    def fix(p: dict[str, Any], idx: int) -> dict[str, Any]:
        title = p.get("title") or f"product{idx}"
        seed = quote(re.sub(r"\s+", "", title), safe="") + str(idx)
        image = p.get("image")
        p["image_local"] = p.get("image_local") or local_asset(idx)
        if not (isinstance(image, str) and _EXTERNAL.match(image)):
            p["image"] = f"https://picsum.photos/seed/{seed}/800/600"
        return p

    return _map_products(doc, fix)


@step(5)
def pin_catalog_images(doc: Document) -> Document:
    """Pin known catalog items to fixed photos."""

    def fix(p: dict[str, Any], idx: int) -> dict[str, Any]:
        pinned = pinned_image(p.get("title") or "")
        if pinned:
            p["image"] = pinned
        return p

    return _map_products(doc, fix)


def registered_steps() -> dict[int, Step]:
    return dict(_STEPS)


def stored_version(doc: Document) -> int:
    """Version tag of a raw document; missing or invalid tags count as 1."""
    version = doc.get("version")
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        return 1
    return version


def migrate(
    doc: Document,
    persist: Callable[[Document], None] | None = None,
    target: int = CURRENT_VERSION,
) -> Document:
    """
    Bring a raw document up to `target`.

    Args:
        doc: Raw document as read from storage. Not modified.
        persist: Called with the document after every completed step.
        target: Version to stop at. Defaults to the running code's version.

    Returns:
        The migrated document. When the document is already at `target`,
        the very same object is returned untouched.

    Raises:
        ValueError: If the document is newer than `target`, or a step is missing.
    """
    version = stored_version(doc)
    if version > target:
        raise ValueError(f"Document version {version} is newer than supported version {target}")
    if version == target and doc.get("version") == target:
        return doc

    current = copy.deepcopy(doc)
    current["version"] = version
    while current["version"] < target:
        from_version = current["version"]
        fn = _STEPS.get(from_version)
        if fn is None:
            raise ValueError(f"No migration registered for version {from_version}")
        current = fn(current)
        current["version"] = from_version + 1
        logger.info("Store migrated v%d -> v%d (%s)", from_version, from_version + 1, fn.__name__)
        if persist is not None:
            persist(current)
    return current
