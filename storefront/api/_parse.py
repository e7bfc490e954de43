"""
Response parsers — raw JSON into domain values.

Every parser is total: malformed input becomes Error(ApiError(CONTRACT)),
never an exception and never a silently empty value.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kungfu import Result, Ok, Error

from storefront._types import Identity, Product, CartLineItem, CartSnapshot
from storefront.api._types import Json, ApiError, ApiErrors, PaymentIntent

# ═══════════════════════════════════════════════════════════════════════════════
# Field Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _ident(value: Any) -> str | None:
    """Normalise a wire id (str or int) to str. Empty → None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _int_or(value: Any, default: int) -> int | None:
    """None → default; int → int; anything else → None (invalid)."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════


def parse_identity(body: Json) -> Result[Identity, ApiError]:
    if not isinstance(body, Mapping):
        return Error(ApiErrors.contract("Unexpected profile response", repr(body)))

    identity_id = _ident(body.get("id"))
    if identity_id is None:
        return Error(ApiErrors.contract("Profile has no id", repr(body)))

    extra = {k: v for k, v in body.items() if k not in ("id", "email", "name")}
    return Ok(Identity(
        id=identity_id,
        email=_str_or_none(body.get("email")) or "",
        name=_str_or_none(body.get("name")),
        extra=extra,
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


def parse_line_item(raw: Json) -> Result[CartLineItem, ApiError]:
    """
    Parse one cart line.

    Missing price_cents → 0, missing quantity → 1.
    Present but wrong-typed or out-of-range values are contract errors.
    """
    if not isinstance(raw, Mapping):
        return Error(ApiErrors.contract("Unexpected cart item", repr(raw)))

    product_id = _ident(raw.get("product_id"))
    if product_id is None:
        return Error(ApiErrors.contract("Cart item has no product_id", repr(raw)))

    price = _int_or(raw.get("price_cents"), 0)
    if price is None or price < 0:
        return Error(ApiErrors.contract("Cart item has invalid price", repr(raw)))

    quantity = _int_or(raw.get("quantity"), 1)
    if quantity is None or quantity < 1:
        return Error(ApiErrors.contract("Cart item has invalid quantity", repr(raw)))

    return Ok(CartLineItem(
        product_id=product_id,
        name=_str_or_none(raw.get("name")) or "",
        image_ref=_str_or_none(raw.get("image")),
        price_cents=price,
        quantity=quantity,
    ))


def parse_cart(body: Json) -> Result[CartSnapshot, ApiError]:
    """
    Parse a cart response: {id?, user_id?, items: [...]}.

    Note: items must be present and a list. A missing list is NOT an empty
    cart. Duplicate product ids keep the first occurrence.
    """
    if not isinstance(body, Mapping) or not isinstance(body.get("items"), list):
        return Error(ApiErrors.contract("Unexpected cart response", repr(body)))

    items: list[CartLineItem] = []
    seen: set[str] = set()
    for raw in body["items"]:
        match parse_line_item(raw):
            case Ok(item):
                if item.product_id in seen:
                    continue
                seen.add(item.product_id)
                items.append(item)
            case Error(e):
                return Error(e)

    return Ok(CartSnapshot(
        cart_id=_ident(body.get("id")),
        owner_id=_ident(body.get("user_id")),
        items=tuple(items),
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


def parse_payment_intent(body: Json) -> Result[PaymentIntent, ApiError]:
    if not isinstance(body, Mapping):
        return Error(ApiErrors.contract("No client secret received", repr(body)))

    secret = _str_or_none(body.get("client_secret"))
    if not secret:
        return Error(ApiErrors.contract("No client secret received", repr(body)))

    return Ok(PaymentIntent(
        client_secret=secret,
        payment_id=_ident(body.get("payment_id")),
        status=_str_or_none(body.get("status")),
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Catalogue
# ═══════════════════════════════════════════════════════════════════════════════


def parse_product(raw: Json) -> Result[Product, ApiError]:
    if not isinstance(raw, Mapping):
        return Error(ApiErrors.contract("Unexpected product", repr(raw)))

    product_id = _ident(raw.get("id"))
    if product_id is None:
        return Error(ApiErrors.contract("Product has no id", repr(raw)))

    # Catalogue rows carry "price"; cart-shaped rows carry "price_cents".
    price = _int_or(raw.get("price_cents", raw.get("price")), 0)
    if price is None or price < 0:
        return Error(ApiErrors.contract("Product has invalid price", repr(raw)))

    return Ok(Product(
        id=product_id,
        name=_str_or_none(raw.get("name")) or "",
        price_cents=price,
        image=_str_or_none(raw.get("image")),
        category=_str_or_none(raw.get("category")),
        description=_str_or_none(raw.get("description")),
    ))


def parse_products(body: Json) -> Result[tuple[Product, ...], ApiError]:
    # The product service encodes an empty result as null.
    if body is None:
        return Ok(())
    if not isinstance(body, list):
        return Error(ApiErrors.contract("Unexpected products response", repr(body)))

    products: list[Product] = []
    for raw in body:
        match parse_product(raw):
            case Ok(product):
                products.append(product)
            case Error(e):
                return Error(e)
    return Ok(tuple(products))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "parse_identity",
    "parse_line_item",
    "parse_cart",
    "parse_payment_intent",
    "parse_product",
    "parse_products",
)
