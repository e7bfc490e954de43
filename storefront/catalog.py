"""
Catalog — read-only product listing and search.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from storefront._types import Product
from storefront.api import Api, ApiError, parse_products
from storefront.log import get_logger

logger = get_logger(__name__)


class Catalog:
    def __init__(self, api: Api) -> None:
        self._api = api

    async def list_products(self) -> Result[tuple[Product, ...], ApiError]:
        match await self._api.list_products():
            case Ok(body):
                return self._parsed(body, query=None)
            case Error(e):
                logger.warning("Failed to list products", kind=e.kind.name, status=e.status, detail=e.detail)
                return Error(e)

    async def search(self, query: str) -> Result[tuple[Product, ...], ApiError]:
        """Blank query → no hits, no remote call."""
        query = query.strip()
        if not query:
            return Ok(())

        match await self._api.search_products(query):
            case Ok(body):
                return self._parsed(body, query=query)
            case Error(e):
                logger.warning("Product search failed", query=query, kind=e.kind.name, status=e.status)
                return Error(e)

    @staticmethod
    def _parsed(body: object, query: str | None) -> Result[tuple[Product, ...], ApiError]:
        match parse_products(body):
            case Ok(products):
                logger.debug("Products loaded", query=query, count=len(products))
                return Ok(products)
            case Error(e):
                logger.error("Unexpected products response", query=query, detail=e.detail)
                return Error(e)


__all__ = ("Catalog",)
