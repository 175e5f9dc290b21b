"""Shared view helpers: formatting, filtering and the product card grid."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable

import streamlit as st

from ganimart.domains.errors import StorefrontError
from ganimart.domains.models import Product, Review
from ganimart.routing.router import ViewContext, product_fragment
from ganimart.services.storefront import Storefront

GRID_COLUMNS = 3


def attempt(operation: Callable[..., Any], *args: Any, st=st, **kwargs: Any) -> bool:
    """Run one storefront operation, showing a rejection with ``st.error``. True on success."""
    try:
        operation(*args, **kwargs)
    except StorefrontError as e:
        st.error(str(e))
        return False
    return True


def format_price(amount: float) -> str:
    return f"${amount:,.2f}"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def stars(rating: float) -> str:
    """Five-star strip, e.g. 4 -> '★★★★☆'."""
    filled = max(0, min(5, round_half_up(rating)))
    return "★" * filled + "☆" * (5 - filled)


def display_rating(product: Product, reviews: Iterable[Review]) -> int:
    """Mean review rating rounded for star display; the product's own rating when unreviewed."""
    ratings = [r.rating for r in reviews]
    if not ratings:
        return round_half_up(product.rating or 0)
    return round_half_up(sum(ratings) / len(ratings))


def filter_products(
    products: Iterable[Product],
    query: str = "",
    category: str = "",
    max_price: float | None = None,
) -> list[Product]:
    """
    Filter a product collection for the catalog and seller views.

    Args:
        products: Full collection; never modified.
        query: Case-insensitive substring of the title. Blank = no filter.
        category: Exact category. Blank = all categories.
        max_price: Inclusive price ceiling, applied only when > 0.
    """
    q = (query or "").strip().lower()
    out = list(products)
    if q:
        out = [p for p in out if q in p.title.lower()]
    if category:
        out = [p for p in out if p.category == category]
    if max_price is not None and max_price > 0:
        out = [p for p in out if p.price <= max_price]
    return out


def header_state(shop: Storefront) -> dict[str, Any]:
    user = shop.current_user()
    return {
        "account_label": user.name if user else "Login",
        "account_target": "#profile" if user else "#auth",
        "show_seller": shop.is_seller(),
        "cart_count": shop.cart_count(),
    }


def product_image(product: Product) -> str | None:
    return product.image or product.image_local or None


def render_product_card(ctx: ViewContext, product: Product, key_prefix: str, st=st) -> None:
    image = product_image(product)
    if image:
        st.image(image, caption=None, use_container_width=True)
    st.markdown(f"**{product.title}**")
    st.markdown(f"{format_price(product.price)} · {stars(product.rating or 4)}")
    view_col, add_col = st.columns(2)
    with view_col:
        if st.button("View", key=f"{key_prefix}_view_{product.id}", use_container_width=True):
            ctx.navigate(product_fragment(product.id))
    with add_col:
        if st.button("Add", key=f"{key_prefix}_add_{product.id}", type="primary", use_container_width=True):
            if attempt(ctx.shop.add_to_cart, product.id, 1, st=st):
                ctx.navigate(ctx.location.fragment)


def render_product_grid(ctx: ViewContext, products: list[Product], key_prefix: str, st=st) -> None:
    if not products:
        st.caption("No products found.")
        return
    for start in range(0, len(products), GRID_COLUMNS):
        row = products[start : start + GRID_COLUMNS]
        cols = st.columns(GRID_COLUMNS)
        for col, product in zip(cols, row):
            with col:
                with st.container(border=True):
                    render_product_card(ctx, product, key_prefix, st=st)
