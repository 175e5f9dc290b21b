"""
Client for the legacy server-side cart form (POST /cart/add).

This path is independent of the locally stored cart: it only reports the
server's item count for display and is never reconciled with the store
document.
"""

from __future__ import annotations

from typing import Any

import requests

from ganimart.utils.config import legacy_cart_timeout, legacy_cart_url
from ganimart.utils.logger import get_logger

logger = get_logger()

UNEXPECTED_ERROR = "An unexpected error occurred."


def add_to_remote_cart(
    product_id: int,
    quantity: int,
    base_url: str | None = None,
    timeout: int | None = None,
) -> dict[str, Any]:
    """
    Submit the legacy add-to-cart form.

    Args:
        product_id: Product to add.
        quantity: Quantity as entered in the form.
        base_url: Server base URL. Defaults to LEGACY_CART_URL.
        timeout: Request timeout in seconds. Defaults to LEGACY_CART_TIMEOUT.

    Returns:
        Dict with "success" (bool) and "message" (str). On success also
        "cart_item_count" as reported by the server (may be None).
    """
    url = (base_url or legacy_cart_url() or "").rstrip("/")
    if not url:
        return {
            "success": False,
            "message": "Legacy cart endpoint is not configured",
            "error": "LEGACY_CART_URL not set in .env.",
        }

    endpoint = f"{url}/cart/add"
    try:
        logger.info("Legacy cart add: product=%s quantity=%s", product_id, quantity)
        response = requests.post(
            endpoint,
            data={"productId": str(product_id), "quantity": str(quantity)},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout if timeout is not None else legacy_cart_timeout(),
        )
    except requests.exceptions.RequestException as e:
        logger.exception("Legacy cart request failed: %s", e)
        return {"success": False, "message": UNEXPECTED_ERROR, "error": type(e).__name__}

    status_code = getattr(response, "status_code", None)
    if not (status_code and 200 <= status_code < 300):
        body = response.text or ""
        logger.warning("Legacy cart endpoint returned %s: %s", status_code, body)
        return {"success": False, "message": f"Error: {body}", "status_code": status_code}

    try:
        parsed = response.json()
    except ValueError as e:
        logger.warning("Legacy cart endpoint returned invalid JSON: %s", e)
        return {"success": False, "message": UNEXPECTED_ERROR, "status_code": status_code}

    count = parsed.get("cartItemCount") if isinstance(parsed, dict) else None
    return {
        "success": True,
        "message": "Product added to cart successfully!",
        "cart_item_count": count,
        "status_code": status_code,
    }
