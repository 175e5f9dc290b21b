"""Location-fragment routing."""

from ganimart.routing.router import (
    ROUTES,
    Location,
    Redirect,
    RouteMatch,
    Router,
    ViewContext,
    catalog_fragment,
    parse_fragment,
    product_fragment,
)

__all__ = [
    "ROUTES",
    "Location",
    "Redirect",
    "RouteMatch",
    "Router",
    "ViewContext",
    "catalog_fragment",
    "parse_fragment",
    "product_fragment",
]
