"""
Tests for view helpers (filtering, ratings, header state) and Streamlit views with a mocked `st`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from ganimart.domains.models import Product, Review
from ganimart.infrastructure.storage import FileBackend, Store
from ganimart.infrastructure.storage.store import SAVE_FAILED
from ganimart.routing import Location, ViewContext, parse_fragment
from ganimart.services.storefront import Storefront
from ganimart.ui import views
from ganimart.ui.components import (
    display_rating,
    filter_products,
    format_price,
    header_state,
    stars,
)


@pytest.fixture
def shop(tmp_path: Path) -> Storefront:
    store = Store(FileBackend(tmp_path), key="views")
    store.load()
    return Storefront(store)


@pytest.fixture
def fake_st() -> MagicMock:
    """Streamlit stand-in: no button pressed, widgets return their initial value."""
    st = MagicMock()
    st.button.return_value = False
    st.form_submit_button.return_value = False
    st.columns.side_effect = lambda spec, **kw: [MagicMock() for _ in range(spec if isinstance(spec, int) else len(spec))]
    st.number_input.side_effect = lambda label, **kw: kw.get("value", 0)
    st.text_input.side_effect = lambda label, **kw: kw.get("value", "")
    st.text_area.side_effect = lambda label, **kw: kw.get("value", "")
    st.slider.side_effect = lambda label, **kw: kw.get("value", 1)
    st.selectbox.return_value = "All"
    st.session_state = {}
    return st


def make_ctx(shop: Storefront, fragment: str, params: dict[str, Any] | None = None) -> ViewContext:
    return ViewContext(shop=shop, location=parse_fragment(fragment), params=params or {}, navigate=MagicMock())


def press(*keys: str):
    return lambda label, **kw: kw.get("key") in keys


# ---------------------- Helpers ----------------------

def _product(pid: int, title: str, price: float, category: str) -> Product:
    return Product(id=pid, title=title, price=price, category=category, stock=1, image="")


PRODUCTS = [
    _product(1, "Wireless Headphones", 79.99, "Electronics"),
    _product(2, "Yoga Mat Eco", 25.0, "Sports"),
    _product(3, "Running Shoes", 89.0, "Sports"),
]


def test_filter_products_by_title_case_insensitive() -> None:
    assert [p.id for p in filter_products(PRODUCTS, query="  MAT ")] == [2]


def test_filter_products_by_category_and_price() -> None:
    assert [p.id for p in filter_products(PRODUCTS, category="Sports")] == [2, 3]
    assert [p.id for p in filter_products(PRODUCTS, category="Sports", max_price=50)] == [2]
    assert [p.id for p in filter_products(PRODUCTS, max_price=89.0)] == [1, 2, 3]


def test_filter_products_without_filters_returns_everything() -> None:
    assert filter_products(PRODUCTS, max_price=0) == PRODUCTS
    assert filter_products(PRODUCTS, max_price=None) == PRODUCTS


def test_display_rating_uses_review_mean() -> None:
    reviews = [
        Review(id=1, product_id=1, user_id=1, rating=5),
        Review(id=2, product_id=1, user_id=2, rating=4),
    ]
    # 4.5 rounds half up
    assert display_rating(PRODUCTS[0], reviews) == 5
    assert display_rating(PRODUCTS[0], reviews[1:]) == 4


def test_display_rating_falls_back_to_product_rating() -> None:
    product = PRODUCTS[0].model_copy(update={"rating": 3})
    assert display_rating(product, []) == 3


def test_stars_and_price_formatting() -> None:
    assert stars(4) == "★★★★☆"
    assert stars(2.5) == "★★★☆☆"
    assert stars(9) == "★★★★★"
    assert format_price(79.99) == "$79.99"
    assert format_price(1234.5) == "$1,234.50"


def test_header_state(shop: Storefront) -> None:
    state = header_state(shop)
    assert state == {"account_label": "Login", "account_target": "#auth", "show_seller": False, "cart_count": 0}

    shop.authenticate("seller@example.com", "pass")
    shop.add_to_cart(1, 2)
    shop.add_to_cart(2, 1)
    state = header_state(shop)
    assert state == {"account_label": "Seller", "account_target": "#profile", "show_seller": True, "cart_count": 3}


# ---------------------- Views ----------------------

def test_product_view_not_found(shop: Storefront, fake_st: MagicMock) -> None:
    ctx = make_ctx(shop, "#product/abc", {"product_id": None})
    views.render_product(ctx, st=fake_st)
    fake_st.info.assert_called_once_with("Product not found.")


def test_product_view_add_to_cart(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.button.side_effect = press("detail_add_1")
    ctx = make_ctx(shop, "#product/1", {"product_id": 1})

    with patch("ganimart.ui.views.legacy_cart_url", return_value=None):
        views.render_product(ctx, st=fake_st)

    assert [(c.product_id, c.qty) for c in shop.snapshot().cart] == [(1, 1)]
    ctx.navigate.assert_called_with("#product/1")


def test_product_view_save_failure_is_shown_not_raised(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.button.side_effect = press("detail_add_1")
    ctx = make_ctx(shop, "#product/1", {"product_id": 1})

    with patch("ganimart.ui.views.legacy_cart_url", return_value=None), patch.object(
        FileBackend, "write", side_effect=OSError("disk full")
    ):
        views.render_product(ctx, st=fake_st)

    fake_st.error.assert_called_once_with(SAVE_FAILED)
    ctx.navigate.assert_not_called()
    assert shop.snapshot().cart == []


def test_product_view_review_rejected_without_purchase(shop: Storefront, fake_st: MagicMock) -> None:
    shop.authenticate("gani@example.com", "pass")
    ctx = make_ctx(shop, "#product/2", {"product_id": 2})

    with patch("ganimart.ui.views.legacy_cart_url", return_value=None):
        views.render_product(ctx, st=fake_st)

    fake_st.form.assert_not_called()
    assert shop.reviews_for(2) == []


def test_product_view_submits_review_after_purchase(shop: Storefront, fake_st: MagicMock) -> None:
    shop.authenticate("gani@example.com", "pass")
    shop.add_to_cart(2, 1)
    shop.place_order()
    fake_st.form_submit_button.return_value = True
    ctx = make_ctx(shop, "#product/2", {"product_id": 2})

    with patch("ganimart.ui.views.legacy_cart_url", return_value=None):
        views.render_product(ctx, st=fake_st)

    [review] = shop.reviews_for(2)
    assert review.rating == 5 and review.comment == "Loved it!"
    ctx.navigate.assert_called_with("#product/2")


def test_legacy_cart_form_reports_server_count(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.form_submit_button.return_value = True
    ctx = make_ctx(shop, "#product/3", {"product_id": 3})
    result = {"success": True, "message": "Product added to cart successfully!", "cart_item_count": 7}

    with patch("ganimart.ui.views.legacy_cart_url", return_value="http://shop.local"), patch(
        "ganimart.ui.views.add_to_remote_cart", return_value=result
    ) as remote:
        views.render_product(ctx, st=fake_st)

    remote.assert_called_once_with(3, 1)
    assert fake_st.session_state[views.LEGACY_COUNT_KEY] == 7
    # The local cart is not touched by the server-side form
    assert shop.snapshot().cart == []


def test_cart_view_remove_line(shop: Storefront, fake_st: MagicMock) -> None:
    shop.add_to_cart(1, 2)
    shop.add_to_cart(4, 1)
    fake_st.button.side_effect = press("cart_remove_4")
    ctx = make_ctx(shop, "#cart")

    views.render_cart(ctx, st=fake_st)

    assert [c.product_id for c in shop.snapshot().cart] == [1]
    ctx.navigate.assert_called_with("#cart")


def test_cart_view_quantity_change(shop: Storefront, fake_st: MagicMock) -> None:
    shop.add_to_cart(1, 2)
    fake_st.number_input.side_effect = lambda label, **kw: 5
    ctx = make_ctx(shop, "#cart")

    views.render_cart(ctx, st=fake_st)

    assert shop.snapshot().cart[0].qty == 5


def test_checkout_view_places_order(shop: Storefront, fake_st: MagicMock) -> None:
    shop.add_to_cart(1, 3)
    fake_st.form_submit_button.return_value = True
    ctx = make_ctx(shop, "#checkout")

    views.render_checkout(ctx, st=fake_st)

    assert shop.snapshot().cart == []
    assert shop.latest_order().total == 239.97
    ctx.navigate.assert_called_once_with("#confirm")


def test_auth_view_invalid_login_shows_error(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.form_submit_button.side_effect = lambda label, **kw: label == "Login"
    fake_st.text_input.side_effect = lambda label, **kw: "nope@x.com" if label == "Email" else "x"
    ctx = make_ctx(shop, "#auth")

    views.render_auth(ctx, st=fake_st)

    fake_st.error.assert_called_once_with("Invalid credentials")
    ctx.navigate.assert_not_called()
    assert shop.current_user() is None


def test_auth_view_login_redirects_to_profile(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.form_submit_button.side_effect = lambda label, **kw: label == "Login"
    ctx = make_ctx(shop, "#auth")

    views.render_auth(ctx, st=fake_st)

    assert shop.current_user().email == "gani@example.com"
    ctx.navigate.assert_called_once_with("#profile")


def test_seller_view_offers_role_switch(shop: Storefront, fake_st: MagicMock) -> None:
    shop.authenticate("gani@example.com", "pass")
    fake_st.button.side_effect = press("seller_promote")
    ctx = make_ctx(shop, "#seller")

    views.render_seller(ctx, st=fake_st)

    assert shop.current_user().role == "seller"
    ctx.navigate.assert_called_once_with("#seller")


def test_seller_view_rejects_invalid_product(shop: Storefront, fake_st: MagicMock) -> None:
    shop.authenticate("seller@example.com", "pass")
    fake_st.form_submit_button.return_value = True
    ctx = make_ctx(shop, "#seller")

    views.render_seller(ctx, st=fake_st)

    fake_st.error.assert_called_once_with("Provide title and valid price")
    assert len(shop.snapshot().products) == 8


def test_header_search_navigates_to_catalog(shop: Storefront, fake_st: MagicMock) -> None:
    fake_st.button.side_effect = press("nav_search_go")
    fake_st.text_input.side_effect = lambda label, **kw: "yoga"
    ctx = make_ctx(shop, "#home")

    views.render_header(ctx, st=fake_st)

    ctx.navigate.assert_called_once_with("#catalog?q=yoga")


def test_header_reset_demo(shop: Storefront, fake_st: MagicMock) -> None:
    shop.add_to_cart(1, 1)
    fake_st.button.side_effect = press("nav_reset")
    ctx = make_ctx(shop, "#cart")

    views.render_header(ctx, st=fake_st)

    assert shop.snapshot().cart == []
    ctx.navigate.assert_called_once_with("#home")


def test_catalog_view_lists_filtered_results(shop: Storefront, fake_st: MagicMock) -> None:
    ctx = make_ctx(shop, "#catalog?q=shoes", {"q": "shoes"})
    views.render_catalog(ctx, st=fake_st)
    fake_st.caption.assert_any_call("1 results")


def test_every_route_has_a_view() -> None:
    from ganimart.routing import ROUTES

    assert set(views.VIEWS) == set(ROUTES)
    assert Location("home").fragment == "#home"
