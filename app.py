"""
GaniMart storefront: Streamlit UI entry point.

The current location fragment (``#<route>[/<param>][?<query>]``) lives in
session state and mirrors the ``route`` query parameter, so a link such as
``?route=product/3`` opens straight on that page.
"""

import streamlit as st

# Load .env before anything reads configuration
from ganimart.utils.config import load_config, log_level
load_config()

from ganimart.infrastructure.storage import Store
from ganimart.routing import Router
from ganimart.services import Storefront
from ganimart.ui.views import VIEWS, render_header
from ganimart.utils.logger import setup_logger, get_logger

setup_logger("ganimart", level=log_level())
log = get_logger()

st.set_page_config(page_title="GaniMart", layout="wide")


# One storefront per server process: the store document has a single writer.
@st.cache_resource
def get_storefront() -> Storefront:
    store = Store()
    store.load()
    return Storefront(store)


def _initial_location() -> str:
    route = (st.query_params.get("route") or "").strip()
    if not route:
        return "#home"
    return route if route.startswith("#") else f"#{route}"


def go(fragment: str) -> None:
    """Programmatic navigation requested by a view."""
    st.session_state.location = fragment or "#home"
    st.query_params["route"] = st.session_state.location.lstrip("#")
    st.rerun()


shop = get_storefront()

if "location" not in st.session_state:
    st.session_state.location = _initial_location()

router = Router(shop, VIEWS, redirect=go, on_navigate=render_header)
match = router.navigate(st.session_state.location)
if match.redirects:
    log.info("Redirected %s -> %s", st.session_state.location, match.location.fragment)
    st.session_state.location = match.location.fragment
    st.query_params["route"] = match.location.fragment.lstrip("#")
