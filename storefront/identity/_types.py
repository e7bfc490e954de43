"""
Identity types.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from storefront._types import Identity
from storefront.api import ApiError


@dataclass(frozen=True, slots=True)
class IdentityState:
    """
    Snapshot of the session.

    Lifecycle:
        loading=True, identity=None        (before resolve() settles)
        loading=False, identity=Identity   (resolved / logged in)
        loading=False, identity=None       (not logged in; not an error)
    """

    identity: Identity | None
    loading: bool

    @property
    def is_authenticated(self) -> bool:
        return not self.loading and self.identity is not None

    @property
    def identity_id(self) -> str | None:
        return self.identity.id if self.identity is not None else None


@dataclass(frozen=True, slots=True)
class AuthError:
    """User-visible authentication failure; cause is for logs only."""

    message: str
    cause: ApiError | None = None


type IdentityObserver = Callable[[IdentityState], Awaitable[None]]
"""Async callback invoked on every identity transition."""


__all__ = ("IdentityState", "AuthError", "IdentityObserver")
