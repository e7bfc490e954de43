"""
storefront — client core of an online store.

    from storefront import identity as Id   # Who is shopping
    from storefront import cart as Ct       # Server-synchronised cart + totals
    from storefront import checkout as Co   # Payment intent → confirmation
    from storefront import api as A         # Gateway client

    async with Storefront.from_env() as shop:
        await shop.identity.login(Credentials("ann@example.com", "secret"))
"""

from storefront import api
from storefront import identity
from storefront import cart
from storefront import checkout
from storefront import lift
from storefront._types import (
    Lazy,
    Identity,
    Credentials,
    Registration,
    Product,
    CartLineItem,
    CartSnapshot,
)
from storefront.catalog import Catalog
from storefront.config import Settings, load_settings
from storefront.app import Storefront

__version__ = "0.1.0"

__all__ = (
    "api",
    "identity",
    "cart",
    "checkout",
    "lift",
    "Lazy",
    "Identity",
    "Credentials",
    "Registration",
    "Product",
    "CartLineItem",
    "CartSnapshot",
    "Catalog",
    "Settings",
    "load_settings",
    "Storefront",
)
