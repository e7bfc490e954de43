"""
Core types for storefront.

Re-exports from kungfu + the domain values shared by every component.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated shopper principal.

    Note: extra keeps whatever else the profile endpoint returned.
    """

    id: str
    email: str
    name: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Credentials:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class Registration:
    name: str
    email: str
    password: str
    confirm_password: str

    @property
    def passwords_match(self) -> bool:
        return self.password == self.confirm_password


# ═══════════════════════════════════════════════════════════════════════════════
# Catalogue
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price_cents: int = 0
    image: str | None = None
    category: str | None = None
    description: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """
    One product entry in a cart.

    Money is integer minor units (cents). quantity >= 1.
    """

    product_id: str
    name: str = ""
    image_ref: str | None = None
    price_cents: int = 0
    quantity: int = 1

    @classmethod
    def from_product(cls, product: Product) -> CartLineItem:
        return cls(
            product_id=product.id,
            name=product.name,
            image_ref=product.image,
            price_cents=product.price_cents,
            quantity=1,
        )


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """
    Immutable cart copy. Replaced wholesale on fetch.

    Invariant: at most one line item per product_id.
    """

    cart_id: str | None
    owner_id: str | None
    items: tuple[CartLineItem, ...] = ()

    @classmethod
    def empty(cls, owner_id: str | None = None) -> CartSnapshot:
        return cls(cart_id=None, owner_id=owner_id, items=())

    @property
    def order_ref(self) -> str | None:
        """Identifier used as the payment order id: cart id, else owner id."""
        return self.cart_id or self.owner_id

    def contains(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def with_item(self, item: CartLineItem) -> CartSnapshot:
        """Append item unless its product is already present."""
        if self.contains(item.product_id):
            return self
        return CartSnapshot(self.cart_id, self.owner_id, (*self.items, item))

    def without(self, product_id: str) -> CartSnapshot:
        items = tuple(i for i in self.items if i.product_id != product_id)
        return CartSnapshot(self.cart_id, self.owner_id, items)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    # Identity
    "Identity",
    "Credentials",
    "Registration",
    # Catalogue
    "Product",
    # Cart
    "CartLineItem",
    "CartSnapshot",
)
