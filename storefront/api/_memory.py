"""
MemoryApi — in-memory storefront backend.

Note: For tests and demos only. Mirrors the gateway's observable behaviour
(cookie session, server-side cart, intent validation) without a network.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from kungfu import Result, Ok, Error

from storefront._types import Product
from storefront.api._types import Json, ApiError, ApiErrors

# ═══════════════════════════════════════════════════════════════════════════════
# Stored Rows
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class _Account:
    id: str
    email: str
    password: str
    name: str = ""


@dataclass
class _Failure:
    error: ApiError
    times: int | None  # None → until recover()


@dataclass
class IntentRequest:
    """Recorded POST /payments/intent body."""

    order_id: str
    amount: int
    currency: str


# ═══════════════════════════════════════════════════════════════════════════════
# MemoryApi
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class MemoryApi:
    """
    In-memory Api implementation.

    Test controls:
        fail(name, error)   — make a call fail (optionally N times)
        respond(name, body) — return a fixed body (e.g. malformed)
        hold(name)          — suspend a call until the returned event is set

    calls records every call name in order, including failed ones.
    """

    accounts: dict[str, _Account] = field(default_factory=dict)
    products: dict[str, dict[str, Any]] = field(default_factory=dict)
    carts: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    intents: list[IntentRequest] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    session_user: str | None = None

    _failures: dict[str, _Failure] = field(default_factory=dict)
    _overrides: dict[str, Json] = field(default_factory=dict)
    _gates: dict[str, asyncio.Event] = field(default_factory=dict)

    # ───────────────────────────────────────────────────────────────────────────
    # Seeding
    # ───────────────────────────────────────────────────────────────────────────

    def add_account(self, id: str, email: str, password: str, name: str = "") -> None:
        self.accounts[email] = _Account(id, email, password, name)

    def add_product(self, product: Product) -> None:
        self.products[product.id] = {
            "id": product.id,
            "name": product.name,
            "price": product.price_cents,
            "image": product.image or "",
            "category": product.category or "",
            "description": product.description or "",
        }

    def sign_in(self, user_id: str) -> None:
        """Start a session as if the cookie were already set."""
        self.session_user = user_id

    def set_cart(self, user_id: str, items: list[dict[str, Any]]) -> None:
        self.carts[user_id] = [dict(i) for i in items]

    def cart_of(self, user_id: str) -> list[dict[str, Any]]:
        return self.carts.get(user_id, [])

    # ───────────────────────────────────────────────────────────────────────────
    # Controls
    # ───────────────────────────────────────────────────────────────────────────

    def fail(self, name: str, error: ApiError | None = None, *, times: int | None = None) -> None:
        self._failures[name] = _Failure(error or ApiErrors.http(500, "injected"), times)

    def recover(self, name: str) -> None:
        self._failures.pop(name, None)

    def respond(self, name: str, body: Json) -> None:
        self._overrides[name] = body

    def hold(self, name: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[name] = gate
        return gate

    def release(self, name: str) -> None:
        gate = self._gates.pop(name, None)
        if gate is not None:
            gate.set()

    def count(self, name: str) -> int:
        return self.calls.count(name)

    # ───────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ───────────────────────────────────────────────────────────────────────────

    def _take_failure(self, name: str) -> ApiError | None:
        failure = self._failures.get(name)
        if failure is None:
            return None
        if failure.times is not None:
            failure.times -= 1
            if failure.times <= 0:
                del self._failures[name]
        return failure.error

    async def _call(
        self, name: str, handler: Callable[[], Result[Json, ApiError]]
    ) -> Result[Json, ApiError]:
        self.calls.append(name)
        gate = self._gates.get(name)
        if gate is not None:
            await gate.wait()
        # Every remote call is a suspension point.
        await asyncio.sleep(0)

        failure = self._take_failure(name)
        if failure is not None:
            return Error(failure)
        if name in self._overrides:
            return Ok(self._overrides[name])
        return handler()

    def _user(self) -> Result[str, ApiError]:
        if self.session_user is None:
            return Error(ApiErrors.unauthorized(401, "not authorized"))
        return Ok(self.session_user)

    # ───────────────────────────────────────────────────────────────────────────
    # Identity
    # ───────────────────────────────────────────────────────────────────────────

    async def get_profile(self) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            match self._user():
                case Ok(user_id):
                    email = next(
                        (a.email for a in self.accounts.values() if a.id == user_id), ""
                    )
                    return Ok({"id": user_id, "email": email})
                case Error(e):
                    return Error(e)

        return await self._call("get_profile", handle)

    async def register(self, name: str, email: str, password: str) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            if email in self.accounts:
                return Error(ApiErrors.http(409, "couldn't create user"))
            self.add_account(uuid.uuid4().hex[:12], email, password, name)
            return Ok("user created!")

        return await self._call("register", handle)

    async def login(self, email: str, password: str) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            account = self.accounts.get(email)
            if account is None or account.password != password:
                return Error(ApiErrors.unauthorized(401, "invalid credentials"))
            self.session_user = account.id
            return Ok({"message": "logged in"})

        return await self._call("login", handle)

    async def logout(self) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            self.session_user = None
            return Ok({"message": "logged out"})

        return await self._call("logout", handle)

    # ───────────────────────────────────────────────────────────────────────────
    # Cart
    # ───────────────────────────────────────────────────────────────────────────

    async def get_cart(self) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            match self._user():
                case Ok(user_id):
                    items = [dict(i) for i in self.cart_of(user_id)]
                    return Ok({"id": f"cart-{user_id}", "user_id": user_id, "items": items})
                case Error(e):
                    return Error(e)

        return await self._call("get_cart", handle)

    async def add_to_cart(self, product_id: str) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            match self._user():
                case Error(e):
                    return Error(e)
                case Ok(user_id):
                    pass

            product = self.products.get(product_id)
            if product is None:
                return Error(ApiErrors.http(500, "something went wrong"))

            cart = self.carts.setdefault(user_id, [])
            for row in cart:
                if row["product_id"] == product_id:
                    row["quantity"] += 1
                    return Ok(dict(row))

            row = {
                "product_id": product_id,
                "name": product["name"],
                "image": product["image"],
                "price_cents": product["price"],
                "quantity": 1,
            }
            cart.append(row)
            return Ok(dict(row))

        return await self._call("add_to_cart", handle)

    async def remove_from_cart(self, product_id: str) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            match self._user():
                case Error(e):
                    return Error(e)
                case Ok(user_id):
                    pass

            self.carts[user_id] = [
                row for row in self.cart_of(user_id) if row["product_id"] != product_id
            ]
            return Ok({"success": True, "message": "Item removed"})

        return await self._call("remove_from_cart", handle)

    # ───────────────────────────────────────────────────────────────────────────
    # Payments
    # ───────────────────────────────────────────────────────────────────────────

    async def create_payment_intent(
        self, order_id: str, amount: int, currency: str
    ) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            match self._user():
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass

            if not order_id.strip() or amount <= 0 or len(currency) != 3:
                return Error(ApiErrors.http(400, "invalid request fields"))

            self.intents.append(IntentRequest(order_id, amount, currency))
            intent_id = f"pi_{uuid.uuid4().hex[:16]}"
            return Ok({
                "payment_id": uuid.uuid4().hex[:24],
                "client_secret": f"{intent_id}_secret_{uuid.uuid4().hex[:8]}",
                "status": "pending",
            })

        return await self._call("create_payment_intent", handle)

    # ───────────────────────────────────────────────────────────────────────────
    # Catalogue
    # ───────────────────────────────────────────────────────────────────────────

    async def list_products(self) -> Result[Json, ApiError]:
        return await self._call("list_products", lambda: Ok(list(self.products.values())))

    async def search_products(self, query: str) -> Result[Json, ApiError]:
        def handle() -> Result[Json, ApiError]:
            needle = query.lower()
            hits = [p for p in self.products.values() if needle in p["name"].lower()]
            return Ok(hits or None)

        return await self._call("search_products", handle)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("MemoryApi", "IntentRequest")
