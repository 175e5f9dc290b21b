"""
Schema types for the durable store document.

The whole storefront state lives in one ``StoreDocument``. Older documents
are upgraded as plain dicts by ``ganimart.infrastructure.storage.migrations``
before they are validated into these models, so the models only describe the
current schema version.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

CURRENT_VERSION = 6

# Products without an owner were created by the seed seller account.
SEED_SELLER_ID = 2

Role = Literal["customer", "seller"]


class Product(BaseModel):
    id: int
    title: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = "Misc"
    stock: int = Field(0, ge=0)
    rating: float = Field(4, ge=1, le=5)
    image: str = ""
    image_local: Optional[str] = None
    owner_id: Optional[int] = None


class User(BaseModel):
    id: int
    email: str
    name: str
    role: Role = "customer"
    password: str


class Review(BaseModel):
    id: int
    product_id: int
    user_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class CartLine(BaseModel):
    product_id: int
    qty: int = Field(1, ge=1)


class OrderLine(BaseModel):
    product_id: int
    qty: int = Field(..., ge=1)


class Order(BaseModel):
    id: int
    number: str
    user_id: Optional[int] = None
    items: List[OrderLine]
    total: float
    created_at: datetime
    status: str = "Processing"


class Session(BaseModel):
    user_id: Optional[int] = None


class Sequences(BaseModel):
    """Next identifier to mint per entity kind. Only ever incremented."""

    product: int = 1
    user: int = 1
    review: int = 1
    order: int = 1

    def mint(self, kind: Literal["product", "user", "review", "order"]) -> int:
        value = getattr(self, kind)
        setattr(self, kind, value + 1)
        return value


class StoreDocument(BaseModel):
    products: List[Product] = []
    users: List[User] = []
    reviews: List[Review] = []
    orders: List[Order] = []
    cart: List[CartLine] = []
    session: Session = Field(default_factory=Session)
    seq: Sequences = Field(default_factory=Sequences)
    version: int = CURRENT_VERSION

    @model_validator(mode="after")
    def _counters_above_existing_ids(self) -> "StoreDocument":
        # A counter that lags behind stored ids would mint a duplicate.
        for kind, items in (
            ("product", self.products),
            ("user", self.users),
            ("review", self.reviews),
            ("order", self.orders),
        ):
            highest = max((item.id for item in items), default=0)
            if getattr(self.seq, kind) <= highest:
                setattr(self.seq, kind, highest + 1)
        return self


def order_number(order_id: int) -> str:
    """Display number for an order, e.g. 7 -> '#000007'."""
    return f"#{order_id:06d}"
