"""
Totals — integer-cent arithmetic over cart line items.

All amounts are minor currency units. Conversion to major units happens
only in format_cents(), at the presentation boundary.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from storefront._types import CartLineItem

type LineLike = CartLineItem | Mapping[str, Any]
"""A parsed line item or a raw (possibly partial) wire row."""

_SYMBOLS = {"usd": "$", "eur": "€", "gbp": "£"}


def _field(item: LineLike, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _price(item: LineLike) -> int:
    value = _field(item, "price_cents")
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _quantity(item: LineLike) -> int:
    value = _field(item, "quantity")
    return value if isinstance(value, int) and not isinstance(value, bool) else 1


def per_item_total(item: LineLike) -> int:
    """price_cents * quantity. Missing price → 0, missing quantity → 1."""
    return _price(item) * _quantity(item)


def aggregate_total(items: Iterable[LineLike]) -> int:
    return sum(per_item_total(item) for item in items)


def item_count(items: Iterable[LineLike]) -> int:
    return sum(_quantity(item) for item in items)


def format_cents(cents: int, currency: str = "usd") -> str:
    """
    Render minor units for display: 1000 → "$10.00".

    Unknown currencies render as "10.00 CHF".
    """
    sign = "-" if cents < 0 else ""
    major, minor = divmod(abs(cents), 100)
    symbol = _SYMBOLS.get(currency.lower())
    if symbol is None:
        return f"{sign}{major}.{minor:02d} {currency.upper()}"
    return f"{sign}{symbol}{major}.{minor:02d}"


__all__ = (
    "LineLike",
    "per_item_total",
    "aggregate_total",
    "item_count",
    "format_cents",
)
