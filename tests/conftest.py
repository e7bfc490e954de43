"""Shared fixtures: in-memory gateway, fake payment widget, wired components."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest
from kungfu import Ok, Error

from storefront import Product
from storefront.api import MemoryApi
from storefront.cart import CartStore
from storefront.checkout import CheckoutOrchestrator, PaymentOutcome, PaymentSucceeded
from storefront.identity import IdentitySession

USER_ID = "u1"
EMAIL = "ann@example.com"
PASSWORD = "hunter22"

MUG = Product(id="1", name="Mug", price_cents=500, image="mug.png")
TEE = Product(id="2", name="Tee", price_cents=1999, image="tee.png")


def ok_value(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def err_value(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")


async def settle(rounds: int = 5) -> None:
    """Let pending tasks run up to their next real suspension."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass
class FakePayments:
    """Payment widget stand-in: replays queued outcomes, records secrets."""

    outcomes: list[PaymentOutcome | Exception] = field(default_factory=list)
    secrets: list[str] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def confirm(self, client_secret: str) -> PaymentOutcome:
        self.secrets.append(client_secret)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else PaymentSucceeded()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def api() -> MemoryApi:
    backend = MemoryApi()
    backend.add_account(USER_ID, EMAIL, PASSWORD, name="Ann")
    backend.add_account("u2", "bob@example.com", "swordfish", name="Bob")
    backend.add_product(MUG)
    backend.add_product(TEE)
    return backend


@pytest.fixture
def session(api: MemoryApi) -> IdentitySession:
    return IdentitySession(api)


@pytest.fixture
def store(api: MemoryApi, session: IdentitySession) -> CartStore:
    cart = CartStore(api, session)
    cart.attach()
    return cart


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def orchestrator(api: MemoryApi, payments: FakePayments) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(api, payments, currency="usd")
