"""Streamlit views, one per route.

Each view reads the storefront, draws its widgets and, when the user acts,
calls exactly one storefront operation followed by ``ctx.navigate``.
Operation rejections are shown in place with ``st.error``.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from ganimart.domains.errors import StorefrontError
from ganimart.infrastructure.legacy_cart import add_to_remote_cart
from ganimart.routing.router import Renderer, ViewContext, catalog_fragment
from ganimart.ui.components import (
    attempt,
    display_rating,
    filter_products,
    format_price,
    header_state,
    product_image,
    render_product_grid,
    stars,
)
from ganimart.utils.config import legacy_cart_url
from ganimart.utils.logger import get_logger

logger = get_logger()

FEATURED_COUNT = 8
HERO_IMAGE = "https://images.unsplash.com/photo-1441986300917-64674bd600d8?w=1200&h=400&fit=crop"
LEGACY_COUNT_KEY = "legacy_cart_item_count"


def _go(ctx: ViewContext, label: str, target: str, key: str, st=st, **kwargs: Any) -> None:
    if st.button(label, key=key, **kwargs):
        ctx.navigate(target)


def render_home(ctx: ViewContext, st=st) -> None:
    st.image(HERO_IMAGE, use_container_width=True)
    st.header("Discover products you love")
    st.caption("Fast search, clear details, simple checkout.")
    shop_col, sell_col = st.columns(2)
    with shop_col:
        _go(ctx, "Shop now", "#catalog", "home_shop", st=st, type="primary")
    with sell_col:
        _go(ctx, "Sell on GaniMart", "#seller", "home_sell", st=st)

    st.subheader("Featured")
    render_product_grid(ctx, ctx.shop.products()[:FEATURED_COUNT], "featured", st=st)


def render_catalog(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    filters_col, results_col = st.columns([1, 3])
    with filters_col:
        category = st.selectbox("Category", ["All"] + shop.categories(), key="catalog_category")
        max_price = st.number_input(
            "Price up to", min_value=0.0, value=0.0, step=1.0, key="catalog_max_price",
            help="0 means no limit",
        )
    query = ctx.params.get("q", "")
    results = filter_products(
        shop.products(),
        query=query,
        category="" if category == "All" else category,
        max_price=max_price,
    )
    with results_col:
        st.subheader("Catalog")
        if query:
            st.caption(f'Search: "{query}"')
        st.caption(f"{len(results)} results")
        render_product_grid(ctx, results, "catalog", st=st)


def render_product(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    product = shop.get_product(ctx.params.get("product_id"))
    if product is None:
        st.info("Product not found.")
        return

    reviews = shop.reviews_for(product.id)
    image_col, detail_col = st.columns(2)
    with image_col:
        image = product_image(product)
        if image:
            st.image(image, use_container_width=True)
    with detail_col:
        st.header(product.title)
        st.markdown(
            f"**{format_price(product.price)}** · {stars(display_rating(product, reviews))}"
            f" · In stock: {product.stock}"
        )
        qty = st.number_input("Quantity", min_value=1, value=1, step=1, key=f"detail_qty_{product.id}")
        if st.button("Add to Cart", key=f"detail_add_{product.id}", type="primary"):
            if attempt(shop.add_to_cart, product.id, max(1, int(qty or 1)), st=st):
                ctx.navigate(ctx.location.fragment)
        if product.description:
            st.caption(product.description)
        if legacy_cart_url():
            _render_legacy_cart_form(product.id, st=st)

    st.subheader("Reviews")
    _render_review_form(ctx, product.id, st=st)
    if not reviews:
        st.caption("No reviews yet.")
    for review in reviews:
        author = shop.get_user(review.user_id)
        with st.container(border=True):
            st.markdown(f"**{author.name if author else 'User'}** {stars(review.rating)}")
            st.write(review.comment)


def _render_review_form(ctx: ViewContext, product_id: int, st=st) -> None:
    shop = ctx.shop
    user = shop.current_user()
    if user is None:
        _go(ctx, "Write Review", "#auth", f"review_login_{product_id}", st=st)
        return
    if not shop.has_purchased(user.id, product_id):
        st.caption("Only customers who purchased this product can write a review.")
        return
    with st.form(f"review_form_{product_id}", clear_on_submit=True):
        rating = st.slider("Rating", min_value=1, max_value=5, value=5)
        comment = st.text_area("Comment", value="Loved it!")
        if st.form_submit_button("Submit review"):
            try:
                shop.submit_review(product_id, user.id, int(rating), (comment or "").strip())
            except StorefrontError as e:
                st.error(str(e))
                return
            ctx.navigate(ctx.location.fragment)


def _render_legacy_cart_form(product_id: int, st=st) -> None:
    with st.expander("Add to server cart"):
        with st.form(f"legacy_cart_{product_id}"):
            quantity = st.number_input("Quantity", min_value=1, value=1, step=1)
            if st.form_submit_button("Add to server cart"):
                result = add_to_remote_cart(product_id, int(quantity))
                if result.get("success"):
                    st.session_state[LEGACY_COUNT_KEY] = result.get("cart_item_count")
                    st.success(result.get("message"))
                else:
                    st.error(result.get("message"))


def render_cart(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    st.header("Shopping Cart")
    lines = shop.cart_lines()
    if not lines:
        st.caption("Your cart is empty.")
        _go(ctx, "Continue shopping", "#catalog", "cart_continue_empty", st=st)
        return

    for line, product in lines:
        title_col, qty_col, price_col, remove_col = st.columns([3, 1, 2, 1])
        with title_col:
            st.markdown(f"**{product.title}**")
            st.caption(f"{format_price(product.price)} each")
        with qty_col:
            qty = st.number_input(
                "Qty", min_value=1, value=line.qty, step=1,
                key=f"cart_qty_{product.id}", label_visibility="collapsed",
            )
            new_qty = max(1, int(qty or 1))
            if new_qty != line.qty:
                if attempt(shop.set_cart_line_quantity, product.id, new_qty, st=st):
                    ctx.navigate(ctx.location.fragment)
        with price_col:
            st.markdown(format_price(product.price * line.qty))
        with remove_col:
            if st.button("Remove", key=f"cart_remove_{product.id}"):
                if attempt(shop.remove_cart_line, product.id, st=st):
                    ctx.navigate(ctx.location.fragment)

    st.divider()
    st.markdown(f"**Total: {format_price(shop.cart_total())}**")
    back_col, checkout_col = st.columns(2)
    with back_col:
        _go(ctx, "Continue shopping", "#catalog", "cart_continue", st=st)
    with checkout_col:
        _go(ctx, "Checkout", "#checkout", "cart_checkout", st=st, type="primary")


def render_checkout(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    user = shop.current_user()
    st.header("Checkout")
    with st.form("checkout"):
        ship_col, pay_col = st.columns(2)
        # Shipping and card details are collected for the demo only; nothing is stored.
        with ship_col:
            st.subheader("Shipping")
            st.text_input("Full name", value=user.name if user else "", placeholder="Jane Doe")
            st.text_input("Phone", placeholder="+1 555 000 000")
            st.text_input("Address", placeholder="1 Main St")
            st.text_input("City", placeholder="City")
            st.text_input("ZIP", placeholder="00000")
        with pay_col:
            st.subheader("Payment")
            st.text_input("Card number", placeholder="4242 4242 4242 4242")
            st.text_input("Exp", placeholder="12/29")
            st.text_input("CVC", placeholder="123")
        st.markdown(f"**Total: {format_price(shop.cart_total())}**")
        if st.form_submit_button("Place Order", type="primary"):
            try:
                shop.place_order()
            except StorefrontError as e:
                st.error(str(e))
                return
            ctx.navigate("#confirm")


def render_confirm(ctx: ViewContext, st=st) -> None:
    last = ctx.shop.latest_order()
    st.header("Thank you!")
    st.caption(f"Your order {last.number if last else ''} has been placed.")
    orders_col, shop_col = st.columns(2)
    with orders_col:
        _go(ctx, "View Orders", "#orders", "confirm_orders", st=st)
    with shop_col:
        _go(ctx, "Continue Shopping", "#catalog", "confirm_catalog", st=st, type="primary")


def render_orders(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    user = shop.current_user()
    orders = shop.orders_for(user.id if user else None)
    st.header("Orders")
    if not orders:
        st.caption("No orders yet.")
        return
    st.table(
        [
            {
                "Order": o.number,
                "Date": o.created_at.strftime("%Y-%m-%d %H:%M"),
                "Status": o.status,
                "Total": format_price(o.total),
            }
            for o in orders
        ]
    )


def render_auth(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    login_col, register_col = st.columns(2)
    with login_col:
        st.subheader("Login")
        with st.form("login"):
            email = st.text_input("Email", value="gani@example.com")
            password = st.text_input("Password", value="pass", type="password")
            if st.form_submit_button("Login", type="primary"):
                try:
                    shop.authenticate((email or "").strip(), password or "")
                except StorefrontError as e:
                    st.error(str(e))
                else:
                    ctx.navigate("#profile")
    with register_col:
        st.subheader("Register")
        with st.form("register"):
            name = st.text_input("Name", placeholder="Your name")
            reg_email = st.text_input("Email", placeholder="you@example.com")
            reg_password = st.text_input("Password", type="password", placeholder="Choose a password")
            if st.form_submit_button("Create account"):
                try:
                    shop.register_user((name or "").strip(), (reg_email or "").strip(), reg_password or "")
                except StorefrontError as e:
                    st.error(str(e))
                else:
                    ctx.navigate("#profile")


def render_profile(ctx: ViewContext, st=st) -> None:
    user = ctx.shop.current_user()
    if user is None:
        st.info("Please log in.")
        return
    st.header(f"Welcome, {user.name}")
    st.caption(f"{user.email} · Role: {user.role}")
    orders_col, logout_col = st.columns(2)
    with orders_col:
        _go(ctx, "Orders", "#orders", "profile_orders", st=st)
    with logout_col:
        if st.button("Logout", key="profile_logout"):
            if attempt(ctx.shop.logout, st=st):
                ctx.navigate("#home")
    st.subheader("Addresses")
    st.caption("(Demo) Add at checkout")


def render_seller(ctx: ViewContext, st=st) -> None:
    shop = ctx.shop
    user = shop.current_user()
    if user is None:
        st.info("Please log in.")
        return
    st.header("Seller Dashboard")
    if user.role != "seller":
        st.info("Your account is a customer account.")
        if st.button("Switch my role to seller (demo)", key="seller_promote"):
            if attempt(shop.promote_to_seller, user.id, st=st):
                ctx.navigate(ctx.location.fragment)
        return

    with st.form("new_product", clear_on_submit=True):
        title = st.text_input("Title")
        price = st.number_input("Price", min_value=0.0, value=0.0, step=0.01)
        stock = st.number_input("Stock", min_value=0, value=10, step=1)
        category = st.text_input("Category", placeholder="Electronics")
        image = st.text_input("Image URL", placeholder="https://...")
        description = st.text_area("Description")
        if st.form_submit_button("Add Product", type="primary"):
            try:
                shop.create_product(
                    user.id,
                    title=title,
                    price=price,
                    stock=stock,
                    category=category,
                    image=image,
                    description=description,
                )
            except StorefrontError as e:
                st.error(str(e))
            else:
                ctx.navigate(ctx.location.fragment)

    st.subheader("Your Products")
    mine = shop.products_owned_by(user.id)
    search_col, category_col, price_col = st.columns(3)
    with search_col:
        query = st.text_input("Search title", key="seller_query")
    with category_col:
        categories = sorted({p.category for p in mine})
        category_choice = st.selectbox("Category", ["All"] + categories, key="seller_category")
    with price_col:
        max_price = st.number_input("Price up to", min_value=0.0, value=0.0, step=1.0, key="seller_max_price")
    shown = filter_products(
        mine,
        query=query or "",
        category="" if category_choice == "All" else category_choice,
        max_price=max_price,
    )
    render_product_grid(ctx, shown, "seller", st=st)


def render_header(ctx: ViewContext, st=st) -> None:
    """Sidebar navigation, account link, cart badge, search and demo reset."""
    state = header_state(ctx.shop)
    with st.sidebar:
        st.title("GaniMart")
        _go(ctx, "Home", "#home", "nav_home", st=st, use_container_width=True)
        _go(ctx, "Catalog", "#catalog", "nav_catalog", st=st, use_container_width=True)
        _go(ctx, f"Cart ({state['cart_count']})", "#cart", "nav_cart", st=st, use_container_width=True)
        _go(ctx, "Orders", "#orders", "nav_orders", st=st, use_container_width=True)
        _go(ctx, state["account_label"], state["account_target"], "nav_account", st=st, use_container_width=True)
        if state["show_seller"]:
            _go(ctx, "Seller", "#seller", "nav_seller", st=st, use_container_width=True)

        remote_count = st.session_state.get(LEGACY_COUNT_KEY)
        if remote_count is not None:
            st.caption(f"Server cart items: {remote_count}")

        st.divider()
        query = st.text_input("Search products", value=ctx.params.get("q", ""), key="nav_search")
        if st.button("Search", key="nav_search_go"):
            ctx.navigate(catalog_fragment(query or ""))

        st.divider()
        if st.button("Reset demo data", key="nav_reset"):
            logger.info("Demo reset requested")
            if attempt(ctx.shop.reset_demo, st=st):
                ctx.navigate("#home")


VIEWS: dict[str, Renderer] = {
    "home": render_home,
    "catalog": render_catalog,
    "product": render_product,
    "cart": render_cart,
    "checkout": render_checkout,
    "confirm": render_confirm,
    "orders": render_orders,
    "auth": render_auth,
    "profile": render_profile,
    "seller": render_seller,
}
