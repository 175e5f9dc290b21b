"""
Fragment router: maps ``#<route>[/<param>][?<query>]`` to exactly one view.

Resolution is synchronous and total. Empty or unknown fragments fall back to
the home view; guarded routes return a ``Redirect`` before any view is built;
the header hook runs after every navigation, whichever view was rendered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping
from urllib.parse import parse_qsl, urlencode

from ganimart.services.storefront import Storefront
from ganimart.utils.logger import get_logger

logger = get_logger()

HOME = "home"
MAX_REDIRECTS = 5

_PRODUCT_ID = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Location:
    route: str
    param: str | None = None
    query: dict[str, str] = field(default_factory=dict)

    @property
    def fragment(self) -> str:
        out = f"#{self.route}"
        if self.param is not None:
            out += f"/{self.param}"
        if self.query:
            out += "?" + urlencode(self.query)
        return out


def parse_fragment(fragment: str | None) -> Location:
    """Split a location fragment into route name, path parameter and query."""
    raw = (fragment or "").strip()
    if raw.startswith("#"):
        raw = raw[1:]
    path, _, query = raw.partition("?")
    route, sep, param = path.partition("/")
    return Location(
        route=route.strip() or HOME,
        param=param if sep else None,
        query=dict(parse_qsl(query, keep_blank_values=True)),
    )


def catalog_fragment(query: str = "") -> str:
    query = (query or "").strip()
    return "#catalog?" + urlencode({"q": query}) if query else "#catalog"


def product_fragment(product_id: int) -> str:
    return f"#product/{product_id}"


@dataclass(frozen=True)
class Redirect:
    to: str


Guard = Callable[[Storefront], "Redirect | None"]


def require_session(shop: Storefront) -> Redirect | None:
    return None if shop.current_user() is not None else Redirect("#auth")


def require_cart(shop: Storefront) -> Redirect | None:
    return None if shop.cart_count() > 0 else Redirect("#cart")


def _product_params(location: Location) -> dict[str, Any]:
    param = location.param
    product_id = int(param) if param is not None and _PRODUCT_ID.fullmatch(param) else None
    return {"product_id": product_id}


def _catalog_params(location: Location) -> dict[str, Any]:
    return {"q": location.query.get("q", "")}


@dataclass(frozen=True)
class RouteSpec:
    name: str
    guards: tuple[Guard, ...] = ()
    params: Callable[[Location], dict[str, Any]] | None = None
    needs_param: bool = False


ROUTES: dict[str, RouteSpec] = {
    spec.name: spec
    for spec in (
        RouteSpec(HOME),
        RouteSpec("catalog", params=_catalog_params),
        RouteSpec("product", params=_product_params, needs_param=True),
        RouteSpec("cart"),
        RouteSpec("checkout", guards=(require_cart,)),
        RouteSpec("confirm"),
        RouteSpec("orders"),
        RouteSpec("auth"),
        RouteSpec("profile", guards=(require_session,)),
        RouteSpec("seller", guards=(require_session,)),
    )
}


@dataclass
class RouteMatch:
    name: str
    location: Location
    params: dict[str, Any]
    redirects: list[str] = field(default_factory=list)


@dataclass
class ViewContext:
    """Everything a view needs: the storefront, its route and a way to move on."""

    shop: Storefront
    location: Location
    params: dict[str, Any]
    navigate: Callable[[str], Any]


Renderer = Callable[[ViewContext], Any]


class Router:
    """
    Resolve fragments and dispatch to views.

    Args:
        shop: Storefront the views read from and act on.
        views: Route name -> renderer. Every name in ROUTES must be present.
        redirect: Called by views to request a new location. Defaults to
            navigating immediately through this router.
        on_navigate: Called after every navigation (header and badge refresh).
    """

    def __init__(
        self,
        shop: Storefront,
        views: Mapping[str, Renderer],
        redirect: Callable[[str], Any] | None = None,
        on_navigate: Callable[[ViewContext], Any] | None = None,
    ) -> None:
        missing = sorted(set(ROUTES) - set(views))
        if missing:
            raise ValueError(f"No view registered for routes: {', '.join(missing)}")
        self._shop = shop
        self._views = dict(views)
        self._redirect = redirect or self.navigate
        self._on_navigate = on_navigate

    def resolve(self, fragment: str | None) -> RouteMatch:
        """Find the view for `fragment`, following guard redirects."""
        redirects: list[str] = []
        location = parse_fragment(fragment)
        for _ in range(MAX_REDIRECTS + 1):
            spec = ROUTES.get(location.route)
            if spec is None or (spec.needs_param and location.param is None):
                spec, location = ROUTES[HOME], Location(HOME)

            redirect = next(
                (r for r in (guard(self._shop) for guard in spec.guards) if r is not None),
                None,
            )
            if redirect is None:
                params = spec.params(location) if spec.params else {}
                return RouteMatch(spec.name, location, params, redirects)

            logger.debug("Route %s redirected to %s", location.fragment, redirect.to)
            redirects.append(redirect.to)
            location = parse_fragment(redirect.to)

        logger.warning("Too many redirects from %r; falling back to home", fragment)
        return RouteMatch(HOME, Location(HOME), {}, redirects)

    def navigate(self, fragment: str | None) -> RouteMatch:
        """Resolve `fragment`, render its view, then refresh the header."""
        match = self.resolve(fragment)
        ctx = ViewContext(
            shop=self._shop,
            location=match.location,
            params=match.params,
            navigate=self._redirect,
        )
        self._views[match.name](ctx)
        if self._on_navigate is not None:
            self._on_navigate(ctx)
        return match
