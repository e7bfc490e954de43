"""
Cart types — store state and errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from storefront._types import CartLineItem, CartSnapshot
from storefront.api import ApiError
from storefront.cart._totals import aggregate_total, item_count


class CartErrorKind(Enum):
    REMOTE = auto()  # Transport or server failure
    CONTRACT = auto()  # Cart response had an unexpected shape
    UNAUTHENTICATED = auto()  # No resolved identity; nothing was sent
    SUPERSEDED = auto()  # A newer fetch or identity change won


@dataclass(frozen=True, slots=True)
class CartError:
    kind: CartErrorKind
    message: str
    cause: ApiError | None = None


class CartErrors:
    @staticmethod
    def load(cause: ApiError) -> CartError:
        return CartError(CartErrorKind.REMOTE, "Couldn't load the cart", cause)

    @staticmethod
    def contract(cause: ApiError) -> CartError:
        return CartError(CartErrorKind.CONTRACT, "Unexpected cart response", cause)

    @staticmethod
    def add(cause: ApiError) -> CartError:
        return CartError(CartErrorKind.REMOTE, "Couldn't add to cart", cause)

    @staticmethod
    def remove(cause: ApiError) -> CartError:
        return CartError(CartErrorKind.REMOTE, "Couldn't remove from cart", cause)

    @staticmethod
    def unauthenticated() -> CartError:
        return CartError(CartErrorKind.UNAUTHENTICATED, "Log in to use the cart")

    @staticmethod
    def superseded() -> CartError:
        return CartError(CartErrorKind.SUPERSEDED, "Cart changed, please try again")


@dataclass(frozen=True, slots=True)
class CartState:
    """
    Observable cart state.

    Note: "empty" and "error" are distinct. An error keeps the last
    known-good items (possibly none); an empty cart has no error.
    """

    snapshot: CartSnapshot
    loading: bool
    error: CartError | None = None

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self.snapshot.items

    @property
    def is_empty(self) -> bool:
        return not self.loading and self.error is None and not self.snapshot.items

    @property
    def total_cents(self) -> int:
        return aggregate_total(self.snapshot.items)

    @property
    def item_count(self) -> int:
        return item_count(self.snapshot.items)


__all__ = ("CartErrorKind", "CartError", "CartErrors", "CartState")
