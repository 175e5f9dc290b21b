"""
Tests for the fragment router: parsing, fallback, guards, dispatch and header refresh.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ganimart.infrastructure.storage import FileBackend, Store
from ganimart.routing import ROUTES, Location, Router, catalog_fragment, parse_fragment, product_fragment
from ganimart.services.storefront import Storefront


@pytest.fixture
def shop(tmp_path: Path) -> Storefront:
    store = Store(FileBackend(tmp_path), key="router")
    store.load()
    return Storefront(store)


@pytest.fixture
def views() -> dict[str, MagicMock]:
    return {name: MagicMock(name=f"render_{name}") for name in ROUTES}


@pytest.fixture
def header() -> MagicMock:
    return MagicMock(name="render_header")


@pytest.fixture
def router(shop: Storefront, views: dict[str, MagicMock], header: MagicMock) -> Router:
    return Router(shop, views, redirect=MagicMock(name="redirect"), on_navigate=header)


@pytest.mark.parametrize(
    "fragment,expected",
    [
        ("", Location("home")),
        (None, Location("home")),
        ("#", Location("home")),
        ("#catalog", Location("catalog")),
        ("catalog", Location("catalog")),
        ("#product/3", Location("product", "3")),
        ("#catalog?q=shoes", Location("catalog", None, {"q": "shoes"})),
        ("#product/abc?x=1&y=", Location("product", "abc", {"x": "1", "y": ""})),
    ],
)
def test_parse_fragment(fragment, expected: Location) -> None:
    assert parse_fragment(fragment) == expected


def test_fragment_builders() -> None:
    assert product_fragment(4) == "#product/4"
    assert catalog_fragment("") == "#catalog"
    assert catalog_fragment(" running shoes ") == "#catalog?q=running+shoes"
    assert parse_fragment(catalog_fragment("running shoes")).query == {"q": "running shoes"}
    assert Location("product", "4").fragment == "#product/4"


@pytest.mark.parametrize("fragment", ["", "#nowhere", "#product", "#HOME"])
def test_unknown_or_empty_routes_render_home(router: Router, views: dict[str, MagicMock], fragment: str) -> None:
    match = router.navigate(fragment)
    assert match.name == "home"
    views["home"].assert_called_once()


@pytest.mark.parametrize(
    "fragment,view",
    [
        ("#home", "home"),
        ("#catalog", "catalog"),
        ("#product/2", "product"),
        ("#cart", "cart"),
        ("#confirm", "confirm"),
        ("#orders", "orders"),
        ("#auth", "auth"),
    ],
)
def test_open_routes_dispatch_to_their_view(router: Router, views: dict[str, MagicMock], fragment: str, view: str) -> None:
    router.navigate(fragment)
    views[view].assert_called_once()
    assert sum(v.call_count for v in views.values()) == 1


@pytest.mark.parametrize(
    "fragment,product_id",
    [
        ("#product/3", 3),
        ("#product/007", 7),
        ("#product/abc", None),
        ("#product/", None),
        ("#product/1_0", None),
        ("#product/+3", None),
        ("#product/-3", None),
        ("#product/ 3", None),
        ("#product/3.0", None),
        ("#product/３", None),
    ],
)
def test_product_param_parsed(router: Router, fragment: str, product_id: int | None) -> None:
    assert router.resolve(fragment).params == {"product_id": product_id}


def test_catalog_query_param(router: Router) -> None:
    assert router.resolve("#catalog?q=mat").params == {"q": "mat"}
    assert router.resolve("#catalog").params == {"q": ""}


@pytest.mark.parametrize("fragment", ["#profile", "#seller"])
def test_session_routes_redirect_to_auth(router: Router, views: dict[str, MagicMock], fragment: str) -> None:
    match = router.navigate(fragment)
    assert match.name == "auth"
    assert match.redirects == ["#auth"]
    views["auth"].assert_called_once()
    views[fragment[1:]].assert_not_called()


def test_session_routes_open_when_signed_in(router: Router, shop: Storefront, views: dict[str, MagicMock]) -> None:
    shop.authenticate("gani@example.com", "pass")
    assert router.navigate("#profile").name == "profile"
    assert router.navigate("#seller").name == "seller"


def test_checkout_requires_cart(router: Router, shop: Storefront, views: dict[str, MagicMock]) -> None:
    match = router.navigate("#checkout")
    assert match.name == "cart"
    views["checkout"].assert_not_called()

    shop.add_to_cart(1, 1)
    assert router.navigate("#checkout").name == "checkout"
    views["checkout"].assert_called_once()


def test_checkout_does_not_require_session(router: Router, shop: Storefront) -> None:
    shop.add_to_cart(1, 1)
    assert shop.current_user() is None
    assert router.resolve("#checkout").name == "checkout"


def test_header_refreshed_after_every_navigation(router: Router, header: MagicMock) -> None:
    for fragment in ("#home", "#nowhere", "#profile", "#checkout", "#product/999"):
        router.navigate(fragment)
    assert header.call_count == 5


def test_view_receives_context(router: Router, shop: Storefront, views: dict[str, MagicMock]) -> None:
    router.navigate("#product/5")
    (ctx,), _ = views["product"].call_args
    assert ctx.shop is shop
    assert ctx.params == {"product_id": 5}
    assert ctx.location == Location("product", "5")
    ctx.navigate("#cart")


def test_redirect_callback_used_by_views(shop: Storefront, views: dict[str, MagicMock]) -> None:
    redirect = MagicMock()
    views["auth"].side_effect = lambda ctx: ctx.navigate("#profile")
    Router(shop, views, redirect=redirect).navigate("#auth")
    redirect.assert_called_once_with("#profile")


def test_missing_view_rejected(shop: Storefront, views: dict[str, MagicMock]) -> None:
    del views["orders"]
    with pytest.raises(ValueError, match="orders"):
        Router(shop, views)
