"""
Composition root — wires the gateway client to the state holders.

    async with Storefront.from_env() as shop:
        await shop.identity.login(Credentials(email, password))
        await shop.cart.add_to_cart(product)

        await shop.checkout.begin(shop.cart.snapshot.cart_id, payments)
"""

from __future__ import annotations

from storefront.api import Api, HttpApi
from storefront.cart import CartStore
from storefront.catalog import Catalog
from storefront.checkout import CheckoutOrchestrator
from storefront.config import Settings, load_settings
from storefront.identity import IdentitySession, IdentityState
from storefront.log import configure_logging, get_logger

logger = get_logger(__name__)


class Storefront:
    """
    One shopper's client core.

    The identity session is the single writer of identity; the cart store,
    subscribed to it, is the single writer of the cart. A single checkout
    orchestrator reads both, so two checkout pages never run competing
    attempts on the same cart.
    """

    def __init__(self, api: Api, settings: Settings) -> None:
        self._api = api
        self._settings = settings
        self.identity = IdentitySession(api)
        self.cart = CartStore(api, self.identity)
        self.catalog = Catalog(api)
        self._checkout: CheckoutOrchestrator | None = None
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Storefront:
        api = HttpApi(settings.gateway_url, timeout=settings.request_timeout)
        return cls(api, settings)

    @classmethod
    def from_env(cls) -> Storefront:
        settings = load_settings()
        configure_logging(settings.environment)
        return cls.from_settings(settings)

    @property
    def api(self) -> Api:
        return self._api

    @property
    def settings(self) -> Settings:
        return self._settings

    # ───────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ───────────────────────────────────────────────────────────────────────────

    async def start(self) -> IdentityState:
        """Open the gateway session and resolve who is shopping."""
        if isinstance(self._api, HttpApi):
            await self._api.open()
        self.cart.attach()
        self._started = True
        state = await self.identity.resolve()
        logger.info("Storefront started", authenticated=state.is_authenticated)
        return state

    async def stop(self) -> None:
        if not self._started:
            return
        self.cart.detach()
        if self._checkout is not None:
            self._checkout.cancel()
        if isinstance(self._api, HttpApi):
            await self._api.close()
        self._started = False
        logger.info("Storefront stopped")

    async def __aenter__(self) -> Storefront:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    # ───────────────────────────────────────────────────────────────────────────
    # Checkout
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def checkout(self) -> CheckoutOrchestrator:
        """The one checkout orchestrator of this shopper, created on first use."""
        if self._checkout is None:
            self._checkout = CheckoutOrchestrator(self._api, currency=self._settings.currency)
        return self._checkout


__all__ = ("Storefront",)
