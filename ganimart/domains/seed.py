"""Demo content used to initialize a fresh store document."""

from __future__ import annotations

from ganimart.domains.models import (
    CURRENT_VERSION,
    Product,
    Review,
    Sequences,
    Session,
    StoreDocument,
    User,
)

# Stable photo per catalog title; also used by the v6 migration.
PINNED_IMAGES: dict[str, str] = {
    "wireless headphones": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800&h=600&fit=crop",
    "smart watch": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=800&h=600&fit=crop",
    "ergonomic office chair": "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=800&h=600&fit=crop",
    "gaming mouse": "https://images.unsplash.com/photo-1527864550417-7fd91fc51a46?w=800&h=600&fit=crop",
    "yoga mat": "https://images.unsplash.com/photo-1544367567-0f2fcb009e0b?w=800&h=600&fit=crop",
    "water bottle": "https://images.unsplash.com/photo-1602143407151-7111542de6e8?w=800&h=600&fit=crop",
    "bluetooth speaker": "https://images.unsplash.com/photo-1608043152269-423dbba4e7e1?w=800&h=600&fit=crop",
    "running shoes": "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=800&h=600&fit=crop",
}

# (title, price, category, stock)
DEMO_CATALOG: list[tuple[str, float, str, int]] = [
    ("Wireless Headphones", 79.99, "Electronics", 24),
    ("Smart Watch Series 5", 149.00, "Wearables", 18),
    ("Ergonomic Office Chair", 229.00, "Home & Office", 12),
    ("Gaming Mouse Pro", 39.00, "Electronics", 40),
    ("Yoga Mat Eco", 25.00, "Sports", 50),
    ("Stainless Water Bottle", 19.00, "Outdoors", 70),
    ("Bluetooth Speaker", 59.00, "Electronics", 33),
    ("Running Shoes", 89.00, "Sports", 26),
]


def local_asset(index: int) -> str:
    """Bundled fallback image for the product at catalog position `index`."""
    return f"assets/p{(index % 8) + 1}.svg"


def pinned_image(title: str) -> str | None:
    t = (title or "").lower()
    for needle, url in PINNED_IMAGES.items():
        if needle in t:
            return url
    return None


def seed_document() -> StoreDocument:
    """Build the default document: two demo accounts, the demo catalog, one review."""
    users = [
        User(id=1, email="gani@example.com", name="Gani", role="customer", password="pass"),
        User(id=2, email="seller@example.com", name="Seller", role="seller", password="pass"),
    ]
    products = [
        Product(
            id=i + 1,
            title=title,
            description=f"{title} description",
            price=price,
            category=category,
            stock=stock,
            rating=4,
            image=pinned_image(title) or "",
            image_local=local_asset(i),
        )
        for i, (title, price, category, stock) in enumerate(DEMO_CATALOG)
    ]
    reviews = [
        Review(id=1, product_id=1, user_id=1, rating=5, comment="Great sound and battery!"),
    ]
    return StoreDocument(
        products=products,
        users=users,
        reviews=reviews,
        orders=[],
        cart=[],
        session=Session(user_id=None),
        seq=Sequences(product=len(products) + 1, user=len(users) + 1, review=2, order=1),
        version=CURRENT_VERSION,
    )
