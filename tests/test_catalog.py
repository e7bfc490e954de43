"""Tests for the catalog pass-through."""
from __future__ import annotations

import pytest

from conftest import err_value, ok_value
from storefront import Catalog
from storefront.api import ApiErrorKind, ApiErrors


@pytest.mark.asyncio
async def test_list_products(api):
    products = ok_value(await Catalog(api).list_products())

    assert {p.name for p in products} == {"Mug", "Tee"}


@pytest.mark.asyncio
async def test_search_matches_names(api):
    products = ok_value(await Catalog(api).search("mu"))

    assert [p.id for p in products] == ["1"]


@pytest.mark.asyncio
async def test_search_without_hits_is_empty(api):
    assert ok_value(await Catalog(api).search("lamp")) == ()


@pytest.mark.asyncio
async def test_blank_search_makes_no_call(api):
    assert ok_value(await Catalog(api).search("   ")) == ()
    assert api.count("search_products") == 0


@pytest.mark.asyncio
async def test_list_failure_is_returned(api):
    api.fail("list_products", ApiErrors.network("down"))

    assert err_value(await Catalog(api).list_products()).kind == ApiErrorKind.NETWORK


@pytest.mark.asyncio
async def test_malformed_listing_is_contract_error(api):
    api.respond("list_products", {"products": []})

    assert err_value(await Catalog(api).list_products()).kind == ApiErrorKind.CONTRACT
