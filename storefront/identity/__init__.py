"""
Identity — who is shopping.

    from storefront import identity as Id

    session = Id.IdentitySession(api)
    session.subscribe(on_change)
    await session.resolve()
"""

from storefront.identity._types import IdentityState, AuthError, IdentityObserver
from storefront.identity._session import (
    IdentitySession,
    LOGIN_FAILED,
    REGISTRATION_FAILED,
    PASSWORDS_MISMATCH,
)

__all__ = (
    "IdentityState",
    "AuthError",
    "IdentityObserver",
    "IdentitySession",
    "LOGIN_FAILED",
    "REGISTRATION_FAILED",
    "PASSWORDS_MISMATCH",
)
