"""
Cart store — the only writer of the local CartSnapshot.

Confirm-then-update: the remote call goes first, the local snapshot changes
only after the server acknowledged it. There is no optimistic write and so
no rollback path.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable

from kungfu import Result, Ok, Error

from storefront._types import CartLineItem, CartSnapshot, Product
from storefront.api import Api, Json, parse_cart, parse_line_item
from storefront.cart._types import CartErrors, CartError, CartState
from storefront.identity import IdentitySession, IdentityState
from storefront.log import get_logger

logger = get_logger(__name__)


class CartStore:
    """
    Server-synchronised cart for the current identity.

    Sync trigger: attach() subscribes to the identity session; every
    transition to a new present identity issues exactly one fetch, a
    transition to no identity clears the cart without a remote call.

    Ordering: each fetch and each identity change bumps a version. A fetch
    whose version is no longer current is discarded (last fetch wins).
    Add/remove results apply to the snapshot current at resolution time,
    and only if the owner did not change in between.
    """

    def __init__(self, api: Api, identity: IdentitySession) -> None:
        self._api = api
        self._identity = identity
        self._state = CartState(snapshot=CartSnapshot.empty(), loading=True)
        self._version = 0
        self._owner: str | None = None
        self._detach: Callable[[], None] | None = None

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def snapshot(self) -> CartSnapshot:
        return self._state.snapshot

    # ───────────────────────────────────────────────────────────────────────────
    # Identity Subscription
    # ───────────────────────────────────────────────────────────────────────────

    def attach(self) -> None:
        if self._detach is None:
            self._detach = self._identity.subscribe(self.on_identity)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None

    async def on_identity(self, state: IdentityState) -> None:
        if state.loading:
            return

        if state.identity is None:
            self._version += 1
            self._owner = None
            self._state = CartState(snapshot=CartSnapshot.empty(), loading=False)
            logger.debug("No identity, cart cleared")
            return

        if state.identity.id != self._owner:
            # A new owner never sees the previous owner's lines, even if its fetch fails.
            self._owner = state.identity.id
            self._state = CartState(snapshot=CartSnapshot.empty(owner_id=self._owner), loading=True)
            await self.fetch_cart()

    def _current_owner(self) -> str | None:
        state = self._identity.state
        return state.identity_id if state.is_authenticated else None

    # ───────────────────────────────────────────────────────────────────────────
    # Fetch
    # ───────────────────────────────────────────────────────────────────────────

    async def fetch_cart(self) -> Result[CartSnapshot, CartError]:
        """
        Replace the snapshot with the server's cart.

        No identity → empty, loaded, no error, no remote call.
        Malformed response → CONTRACT error, items left as they were.
        """
        if self._identity.loading:
            return Error(CartErrors.unauthenticated())

        owner = self._current_owner()
        if owner is None:
            self._state = CartState(snapshot=CartSnapshot.empty(), loading=False)
            return Ok(self._state.snapshot)

        self._owner = owner
        self._version += 1
        version = self._version
        self._state = dataclasses.replace(self._state, loading=True)
        logger.debug("Fetching cart", owner_id=owner)

        response = await self._api.get_cart()

        if version != self._version:
            logger.debug("Discarding superseded cart fetch", owner_id=owner)
            return Error(CartErrors.superseded())

        match response:
            case Error(e):
                logger.warning("Load cart error", kind=e.kind.name, status=e.status, detail=e.detail)
                error = CartErrors.load(e)
                self._state = dataclasses.replace(self._state, loading=False, error=error)
                return Error(error)
            case Ok(body):
                pass

        match parse_cart(body):
            case Ok(snapshot):
                if snapshot.owner_id is None:
                    snapshot = dataclasses.replace(snapshot, owner_id=owner)
                self._state = CartState(snapshot=snapshot, loading=False)
                logger.info("Cart loaded", owner_id=owner, items=len(snapshot.items))
                return Ok(snapshot)
            case Error(e):
                logger.error("Unexpected cart response", detail=e.detail)
                error = CartErrors.contract(e)
                self._state = dataclasses.replace(self._state, loading=False, error=error)
                return Error(error)

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    async def add_to_cart(self, product: Product) -> Result[CartSnapshot, CartError]:
        """
        Add product; idempotent per product_id.

        No identity → nothing sent, nothing changed.
        """
        owner = self._current_owner()
        if owner is None:
            logger.debug("Add ignored, no identity", product_id=product.id)
            return Error(CartErrors.unauthenticated())

        result = await self._api.add_to_cart(product.id)

        if self._current_owner() != owner:
            logger.debug("Discarding add for previous identity", product_id=product.id)
            return Error(CartErrors.superseded())

        match result:
            case Error(e):
                logger.warning(
                    "Failed to add to cart",
                    product_id=product.id,
                    kind=e.kind.name,
                    status=e.status,
                    detail=e.detail,
                )
                return Error(CartErrors.add(e))
            case Ok(body):
                pass

        line = _line_from_ack(body, product)
        self._state = dataclasses.replace(
            self._state, snapshot=self._state.snapshot.with_item(line)
        )
        return Ok(self._state.snapshot)

    async def remove_from_cart(self, product_id: str) -> Result[CartSnapshot, CartError]:
        """Remove product_id. Removing an absent product is a no-op after the call."""
        owner = self._current_owner()
        if owner is None:
            logger.debug("Remove ignored, no identity", product_id=product_id)
            return Error(CartErrors.unauthenticated())

        result = await self._api.remove_from_cart(product_id)

        if self._current_owner() != owner:
            logger.debug("Discarding remove for previous identity", product_id=product_id)
            return Error(CartErrors.superseded())

        match result:
            case Error(e):
                logger.warning(
                    "Failed remove from cart",
                    product_id=product_id,
                    kind=e.kind.name,
                    status=e.status,
                    detail=e.detail,
                )
                return Error(CartErrors.remove(e))
            case Ok(_):
                pass

        self._state = dataclasses.replace(
            self._state, snapshot=self._state.snapshot.without(product_id)
        )
        return Ok(self._state.snapshot)


def _line_from_ack(body: Json, product: Product) -> CartLineItem:
    """Prefer the server's line item; fall back to the product itself."""
    match parse_line_item(body):
        case Ok(line) if line.product_id == product.id:
            return line
        case _:
            return CartLineItem.from_product(product)


__all__ = ("CartStore",)
