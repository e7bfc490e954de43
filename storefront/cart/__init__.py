"""
Cart — server-synchronised line items and their totals.

    from storefront import cart as Ct

    store = Ct.CartStore(api, session)
    store.attach()                      # re-sync on identity transitions
    await store.add_to_cart(product)
    Ct.format_cents(store.state.total_cents)   # "$10.00"
"""

from storefront.cart._totals import (
    LineLike,
    per_item_total,
    aggregate_total,
    item_count,
    format_cents,
)
from storefront.cart._types import CartErrorKind, CartError, CartErrors, CartState
from storefront.cart._store import CartStore

__all__ = (
    # Totals
    "LineLike",
    "per_item_total",
    "aggregate_total",
    "item_count",
    "format_cents",
    # State
    "CartErrorKind",
    "CartError",
    "CartErrors",
    "CartState",
    # Store
    "CartStore",
)
