"""
Storefront API — typed remote protocol and its aiohttp implementation.

All methods return Result for explicit error handling. Bodies are returned
raw (decoded JSON); shape validation belongs to the component that owns
the data (see storefront.api._parse).
"""

from __future__ import annotations

import asyncio
import json
from datetime import timedelta
from typing import Any, Protocol

import aiohttp
from kungfu import Result, Ok, Error

from storefront.api._types import Json, ApiError, ApiErrors
from storefront.log import get_logger

logger = get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Api Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Api(Protocol):
    """
    Remote storefront API.

    Implementations: HttpApi (gateway over HTTP), MemoryApi (tests, demos).
    """

    async def get_profile(self) -> Result[Json, ApiError]:
        """GET /profile — current identity."""
        ...

    async def register(self, name: str, email: str, password: str) -> Result[Json, ApiError]:
        """POST /register."""
        ...

    async def login(self, email: str, password: str) -> Result[Json, ApiError]:
        """POST /login — sets the session cookie."""
        ...

    async def logout(self) -> Result[Json, ApiError]:
        """POST /logout."""
        ...

    async def get_cart(self) -> Result[Json, ApiError]:
        """GET /cart/getcart — cart of the session identity."""
        ...

    async def add_to_cart(self, product_id: str) -> Result[Json, ApiError]:
        """POST /cart/add {product_id}."""
        ...

    async def remove_from_cart(self, product_id: str) -> Result[Json, ApiError]:
        """DELETE /cart/remove {product_id}."""
        ...

    async def create_payment_intent(
        self, order_id: str, amount: int, currency: str
    ) -> Result[Json, ApiError]:
        """POST /payments/intent {order_id, amount, currency}."""
        ...

    async def list_products(self) -> Result[Json, ApiError]:
        """GET /products/get."""
        ...

    async def search_products(self, query: str) -> Result[Json, ApiError]:
        """GET /products/search?q=."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Body Decoding
# ═══════════════════════════════════════════════════════════════════════════════


def decode_body(text: str) -> Json:
    """JSON when it parses, the raw text otherwise. Empty → None."""
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


# ═══════════════════════════════════════════════════════════════════════════════
# HttpApi — aiohttp gateway client
# ═══════════════════════════════════════════════════════════════════════════════


class HttpApi:
    """
    Gateway client over one aiohttp session.

    Note: The gateway authenticates by cookie, so the session and its cookie
    jar live for the lifetime of the client. CookieJar(unsafe=True) keeps
    cookies for IP-address hosts (local gateways).
    """

    def __init__(
        self,
        base_url: str,
        timeout: timedelta = timedelta(seconds=30),
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def open(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.CookieJar(unsafe=True),
                timeout=aiohttp.ClientTimeout(total=self._timeout.total_seconds()),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> HttpApi:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ───────────────────────────────────────────────────────────────────────────
    # Transport
    # ───────────────────────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Result[Json, ApiError]:
        session = await self.open()

        url = f"{self._base_url}{path}"
        try:
            async with session.request(method, url, json=body, params=params) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError:
            logger.warning("Request timed out", method=method, path=path)
            return Error(ApiErrors.network(f"{method} {path}: timed out"))
        except aiohttp.ClientError as exc:
            logger.warning("Request failed", method=method, path=path, error=str(exc))
            return Error(ApiErrors.network(f"{method} {path}: {exc}"))

        logger.debug("Response received", method=method, path=path, status=status)

        if status in (401, 403):
            return Error(ApiErrors.unauthorized(status, text))
        if status >= 400:
            logger.warning("Request rejected", method=method, path=path, status=status, body=text)
            return Error(ApiErrors.http(status, text))
        return Ok(decode_body(text))

    # ───────────────────────────────────────────────────────────────────────────
    # Identity
    # ───────────────────────────────────────────────────────────────────────────

    async def get_profile(self) -> Result[Json, ApiError]:
        return await self._request("GET", "/profile")

    async def register(self, name: str, email: str, password: str) -> Result[Json, ApiError]:
        return await self._request(
            "POST", "/register", body={"name": name, "email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> Result[Json, ApiError]:
        return await self._request("POST", "/login", body={"email": email, "password": password})

    async def logout(self) -> Result[Json, ApiError]:
        return await self._request("POST", "/logout")

    # ───────────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────────

    async def get_cart(self) -> Result[Json, ApiError]:
        return await self._request("GET", "/cart/getcart")

    async def add_to_cart(self, product_id: str) -> Result[Json, ApiError]:
        return await self._request("POST", "/cart/add", body={"product_id": product_id})

    async def remove_from_cart(self, product_id: str) -> Result[Json, ApiError]:
        return await self._request("DELETE", "/cart/remove", body={"product_id": product_id})

    # ───────────────────────────────────────────────────────────────────────────
    # Payments
    # ───────────────────────────────────────────────────────────────────────────

    async def create_payment_intent(
        self, order_id: str, amount: int, currency: str
    ) -> Result[Json, ApiError]:
        return await self._request(
            "POST",
            "/payments/intent",
            body={"order_id": order_id, "amount": amount, "currency": currency},
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Catalogue
    # ───────────────────────────────────────────────────────────────────────────

    async def list_products(self) -> Result[Json, ApiError]:
        return await self._request("GET", "/products/get")

    async def search_products(self, query: str) -> Result[Json, ApiError]:
        return await self._request("GET", "/products/search", params={"q": query})


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Api",
    "HttpApi",
    "decode_body",
)
