"""
Storefront operations: the only code path that mutates the store document.

Each mutating method validates its input first and raises a
``StorefrontError`` before touching anything; once validation passes it
mutates the document inside a store transaction, which persists it or
rolls it back and raises ``StoreUnavailable``.

The cart is shared by the whole document rather than scoped per user. That
mirrors the storefront's long-standing behavior and is kept on purpose.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from ganimart.domains.errors import (
    DuplicateEmail,
    EmptyCart,
    InvalidCredentials,
    InvalidInput,
    ReviewNotAllowed,
)
from ganimart.domains.models import (
    SEED_SELLER_ID,
    CartLine,
    Order,
    OrderLine,
    Product,
    Review,
    StoreDocument,
    User,
    order_number,
)
from ganimart.infrastructure.storage.store import Store
from ganimart.utils.logger import get_logger

logger = get_logger()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInput("Quantity must be a positive whole number")
    return quantity


class Storefront:
    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def _doc(self) -> StoreDocument:
        return self._store.document

    def snapshot(self) -> StoreDocument:
        """Detached copy of the whole document."""
        return self._store.snapshot()

    # ---------------------- Reads ----------------------

    def products(self) -> list[Product]:
        """Catalog in display order, as detached copies."""
        return [p.model_copy() for p in self._doc.products]

    def get_product(self, product_id: int | None) -> Product | None:
        if product_id is None:
            return None
        return next((p for p in self._doc.products if p.id == product_id), None)

    def get_user(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        return next((u for u in self._doc.users if u.id == user_id), None)

    def current_user(self) -> User | None:
        return self.get_user(self._doc.session.user_id)

    def is_seller(self) -> bool:
        user = self.current_user()
        return user is not None and user.role == "seller"

    def categories(self) -> list[str]:
        return sorted({p.category for p in self._doc.products})

    def cart_count(self) -> int:
        return sum(line.qty for line in self._doc.cart)

    def cart_lines(self) -> list[tuple[CartLine, Product]]:
        """Cart lines paired with their product; lines for missing products are skipped."""
        out: list[tuple[CartLine, Product]] = []
        for line in self._doc.cart:
            product = self.get_product(line.product_id)
            if product is not None:
                out.append((line, product))
        return out

    def cart_total(self) -> float:
        return round(sum(p.price * line.qty for line, p in self.cart_lines()), 2)

    def reviews_for(self, product_id: int) -> list[Review]:
        return [r for r in self._doc.reviews if r.product_id == product_id]

    def orders_for(self, user_id: int | None) -> list[Order]:
        if user_id is None:
            return []
        return [o for o in self._doc.orders if o.user_id == user_id]

    def latest_order(self) -> Order | None:
        return self._doc.orders[0] if self._doc.orders else None

    def has_purchased(self, user_id: int, product_id: int) -> bool:
        return any(
            any(item.product_id == product_id for item in order.items)
            for order in self.orders_for(user_id)
        )

    def products_owned_by(self, user_id: int) -> list[Product]:
        return [p for p in self._doc.products if (p.owner_id or SEED_SELLER_ID) == user_id]

    # ---------------------- Cart ----------------------

    def add_to_cart(self, product_id: int, quantity: int = 1) -> CartLine:
        """Add `quantity` of a product, accumulating onto an existing line."""
        _require_quantity(quantity)
        with self._store.transaction() as doc:
            line = next((c for c in doc.cart if c.product_id == product_id), None)
            if line is not None:
                line.qty += quantity
            else:
                line = CartLine(product_id=product_id, qty=quantity)
                doc.cart.append(line)
        logger.info("Cart add: product=%s +%d (now %d)", product_id, quantity, line.qty)
        return line

    def set_cart_line_quantity(self, product_id: int, quantity: int) -> CartLine | None:
        """Replace the quantity of an existing line. Returns None if there is no such line."""
        _require_quantity(quantity)
        if not any(c.product_id == product_id for c in self._doc.cart):
            return None
        with self._store.transaction() as doc:
            line = next(c for c in doc.cart if c.product_id == product_id)
            line.qty = quantity
        return line

    def remove_cart_line(self, product_id: int) -> None:
        with self._store.transaction() as doc:
            doc.cart = [c for c in doc.cart if c.product_id != product_id]

    # ---------------------- Orders ----------------------

    def place_order(self) -> Order:
        """Turn the cart into a new order (most recent first) and empty the cart."""
        if not self._doc.cart:
            raise EmptyCart("Your cart is empty")

        with self._store.transaction() as doc:
            items = [OrderLine(product_id=c.product_id, qty=c.qty) for c in doc.cart]
            total = 0.0
            for item in items:
                product = self.get_product(item.product_id)
                if product is not None:
                    total += product.price * item.qty

            order_id = doc.seq.mint("order")
            order = Order(
                id=order_id,
                number=order_number(order_id),
                user_id=doc.session.user_id,
                items=items,
                total=round(total, 2),
                created_at=now_utc(),
                status="Processing",
            )
            doc.orders.insert(0, order)
            doc.cart = []
        logger.info("Order %s placed: %d lines, total %.2f", order.number, len(items), order.total)
        return order

    # ---------------------- Reviews ----------------------

    def submit_review(self, product_id: int, user_id: int, rating: int, comment: str = "") -> Review:
        if not self.has_purchased(user_id, product_id):
            raise ReviewNotAllowed("Only customers who purchased this product can write a review.")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidInput("Rating must be between 1 and 5")

        with self._store.transaction() as doc:
            review = Review(
                id=doc.seq.mint("review"),
                product_id=product_id,
                user_id=user_id,
                rating=rating,
                comment=comment or "",
            )
            doc.reviews.append(review)
        logger.info("Review %d added for product %d by user %d", review.id, product_id, user_id)
        return review

    # ---------------------- Accounts ----------------------

    def register_user(self, name: str, email: str, password: str) -> User:
        if not name or not email or not password:
            raise InvalidInput("Fill all fields")
        if any(u.email == email for u in self._doc.users):
            raise DuplicateEmail("Email already used")

        with self._store.transaction() as doc:
            user = User(
                id=doc.seq.mint("user"),
                email=email,
                name=name,
                role="customer",
                password=password,
            )
            doc.users.append(user)
            doc.session.user_id = user.id
        logger.info("Registered user %d", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = next(
            (u for u in self._doc.users if u.email == email and u.password == password),
            None,
        )
        if user is None:
            raise InvalidCredentials("Invalid credentials")
        with self._store.transaction() as doc:
            doc.session.user_id = user.id
        logger.info("User %d signed in", user.id)
        return user

    def logout(self) -> None:
        with self._store.transaction() as doc:
            doc.session.user_id = None

    def promote_to_seller(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise InvalidInput(f"Unknown user {user_id}")
        if user.role != "seller":
            with self._store.transaction():
                user = self.get_user(user_id)
                user.role = "seller"
            logger.info("User %d switched to seller", user_id)
        return user

    # ---------------------- Catalog ----------------------

    def create_product(
        self,
        seller_id: int,
        title: str,
        price: float,
        stock: int = 0,
        category: str = "",
        image: str = "",
        description: str = "",
    ) -> Product:
        """Add a seller product at the top of the catalog."""
        title = (title or "").strip()
        try:
            price = float(price)
        except (TypeError, ValueError):
            raise InvalidInput("Provide title and valid price")
        if not title or not math.isfinite(price) or price <= 0:
            raise InvalidInput("Provide title and valid price")
        try:
            stock = max(0, int(stock or 0))
        except (TypeError, ValueError, OverflowError):
            stock = 0

        with self._store.transaction() as doc:
            product_id = doc.seq.mint("product")
            product = Product(
                id=product_id,
                title=title,
                description=(description or "").strip(),
                price=price,
                category=(category or "").strip() or "Misc",
                stock=stock,
                rating=4,
                image=(image or "").strip() or f"https://picsum.photos/seed/product{product_id}/800/600",
                owner_id=seller_id,
            )
            doc.products.insert(0, product)
        logger.info("Seller %d created product %d (%s)", seller_id, product_id, title)
        return product

    # ---------------------- Demo ----------------------

    def reset_demo(self) -> None:
        self._store.reset()
