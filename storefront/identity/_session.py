"""
Identity session — the only writer of the current Identity.
"""

from __future__ import annotations

from collections.abc import Callable

from kungfu import Result, Ok, Error

from storefront._types import Identity, Credentials, Registration
from storefront.api import Api, ApiError, parse_identity
from storefront.identity._types import IdentityState, AuthError, IdentityObserver
from storefront.log import bind_context, get_logger, unbind_context

logger = get_logger(__name__)

LOGIN_FAILED = "Login failed"
REGISTRATION_FAILED = "Registration failed"
PASSWORDS_MISMATCH = "Passwords don't match"


class IdentitySession:
    """
    Holds the authenticated shopper (or none) and notifies observers.

    Example:
        session = IdentitySession(api)
        unsubscribe = session.subscribe(cart.on_identity)
        await session.resolve()

        match await session.login(Credentials("a@b.c", "secret")):
            case Ok(identity): ...
            case Error(e): show(e.message)
    """

    def __init__(self, api: Api) -> None:
        self._api = api
        self._state = IdentityState(identity=None, loading=True)
        self._observers: list[IdentityObserver] = []

    @property
    def state(self) -> IdentityState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._state.identity

    @property
    def loading(self) -> bool:
        return self._state.loading

    # ───────────────────────────────────────────────────────────────────────────
    # Observers
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe(self, observer: IdentityObserver) -> Callable[[], None]:
        """Register observer; returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    async def _transition(self, state: IdentityState) -> None:
        self._state = state
        if state.identity is not None:
            bind_context(identity_id=state.identity.id)
        else:
            unbind_context("identity_id")
        for observer in list(self._observers):
            try:
                await observer(state)
            except Exception:
                logger.exception("Identity observer failed", observer=repr(observer))

    # ───────────────────────────────────────────────────────────────────────────
    # Operations
    # ───────────────────────────────────────────────────────────────────────────

    async def _fetch_identity(self) -> Result[Identity, ApiError]:
        match await self._api.get_profile():
            case Ok(body):
                return parse_identity(body)
            case Error(e):
                return Error(e)

    async def resolve(self) -> IdentityState:
        """
        Resolve the current session. Never fails.

        Any failure (network, 401, malformed profile) resolves to "not
        logged in".
        """
        identity: Identity | None = None
        match await self._fetch_identity():
            case Ok(found):
                identity = found
                logger.info("Identity resolved", identity_id=found.id)
            case Error(e):
                logger.info("No identity", kind=e.kind.name, status=e.status, detail=e.detail)

        await self._transition(IdentityState(identity=identity, loading=False))
        return self._state

    async def login(self, credentials: Credentials) -> Result[Identity, AuthError]:
        """Authenticate, then re-fetch identity. Identity unchanged on failure."""
        match await self._api.login(credentials.email, credentials.password):
            case Error(e):
                logger.warning("Login rejected", kind=e.kind.name, status=e.status)
                return Error(AuthError(LOGIN_FAILED, e))
            case Ok(_):
                pass

        match await self._fetch_identity():
            case Ok(identity):
                logger.info("Logged in", identity_id=identity.id)
                await self._transition(IdentityState(identity=identity, loading=False))
                return Ok(identity)
            case Error(e):
                logger.warning("Profile fetch after login failed", kind=e.kind.name, detail=e.detail)
                return Error(AuthError(LOGIN_FAILED, e))

    async def logout(self) -> None:
        """End the session. Remote failure is logged; identity is always cleared."""
        match await self._api.logout():
            case Error(e):
                logger.warning("Logout error", kind=e.kind.name, status=e.status, detail=e.detail)
            case Ok(_):
                logger.info("Logged out")

        await self._transition(IdentityState(identity=None, loading=False))

    async def register(self, registration: Registration) -> Result[None, AuthError]:
        """Create an account. Does not log in."""
        if not registration.passwords_match:
            return Error(AuthError(PASSWORDS_MISMATCH))

        result = await self._api.register(
            registration.name, registration.email, registration.password
        )
        match result:
            case Ok(_):
                logger.info("Account registered")
                return Ok(None)
            case Error(e):
                logger.warning("Registration failed", kind=e.kind.name, status=e.status, detail=e.detail)
                return Error(AuthError(REGISTRATION_FAILED, e))


__all__ = ("IdentitySession", "LOGIN_FAILED", "REGISTRATION_FAILED", "PASSWORDS_MISMATCH")
