"""Tests for integer-cent totals and display formatting."""
from __future__ import annotations

import pytest

from storefront import CartLineItem
from storefront.cart import aggregate_total, format_cents, item_count, per_item_total


def test_per_item_total_multiplies_price_by_quantity():
    assert per_item_total(CartLineItem("1", price_cents=500, quantity=2)) == 1000


def test_per_item_total_defaults_missing_fields():
    assert per_item_total({"product_id": "1", "quantity": 3}) == 0
    assert per_item_total({"product_id": "1", "price_cents": 250}) == 250


def test_per_item_total_ignores_non_integer_values():
    assert per_item_total({"price_cents": "500", "quantity": 2}) == 0
    assert per_item_total({"price_cents": 500, "quantity": None}) == 500
    assert per_item_total({"price_cents": True, "quantity": 2}) == 0


def test_aggregate_total_sums_every_line():
    items = [
        CartLineItem("1", price_cents=500, quantity=2),
        CartLineItem("2", price_cents=1999, quantity=1),
        {"product_id": "3", "price_cents": 1},
    ]
    assert aggregate_total(items) == 1000 + 1999 + 1


def test_aggregate_total_of_nothing_is_zero():
    assert aggregate_total([]) == 0


def test_item_count_sums_quantities():
    assert item_count([CartLineItem("1", quantity=2), {"product_id": "2"}]) == 3


@pytest.mark.parametrize(
    ("cents", "currency", "expected"),
    [
        (1000, "usd", "$10.00"),
        (5, "usd", "$0.05"),
        (123456, "eur", "€1234.56"),
        (199, "GBP", "£1.99"),
        (1000, "chf", "10.00 CHF"),
        (-250, "usd", "-$2.50"),
    ],
)
def test_format_cents(cents, currency, expected):
    assert format_cents(cents, currency) == expected


def test_format_cents_defaults_to_dollars():
    assert format_cents(1000) == "$10.00"


def test_aggregate_total_ignores_line_order():
    items = [
        CartLineItem("1", price_cents=500, quantity=2),
        CartLineItem("2", price_cents=1999, quantity=3),
        CartLineItem("3", price_cents=7, quantity=1),
    ]
    assert aggregate_total(items) == aggregate_total(reversed(items)) == aggregate_total(items[1:] + items[:1])
