"""
Checkout types — session state machine, payment outcomes, errors.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from storefront._types import CartLineItem, CartSnapshot
from storefront.api import ApiError
from storefront.cart import aggregate_total, item_count

# ═══════════════════════════════════════════════════════════════════════════════
# Status — State Machine
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStatus(Enum):
    """
    Checkout attempt lifecycle.

        INITIALIZING → CART_EMPTY            (terminal; return to shopping)
                     → AWAITING_PAYMENT      (cart loaded, secret held)
                     → FAILED                (terminal; re-enter to retry)
        AWAITING_PAYMENT → SUBMITTING
        SUBMITTING → SUCCEEDED               (terminal)
                   → AWAITING_PAYMENT        (recoverable decline)
                   → FAILED                  (terminal)
    """

    INITIALIZING = "initializing"
    AWAITING_PAYMENT = "awaiting_payment"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CART_EMPTY = "cart_empty"

    @property
    def is_terminal(self) -> bool:
        return self in (CheckoutStatus.SUCCEEDED, CheckoutStatus.FAILED, CheckoutStatus.CART_EMPTY)


class RecoveryAction(Enum):
    RETURN_TO_SHOPPING = auto()
    RETRY_CHECKOUT = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Session — One Checkout Attempt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    One checkout attempt. Replaced on every transition, never shared.

    generation identifies the attempt; results from an attempt whose
    generation is no longer current are discarded.
    """

    cart_id: str | None
    generation: int
    status: CheckoutStatus
    cart: CartSnapshot | None = None
    client_secret: str | None = None
    reason: str | None = None
    message: str | None = None

    @classmethod
    def start(cls, cart_id: str | None, generation: int) -> CheckoutSession:
        return cls(cart_id=cart_id, generation=generation, status=CheckoutStatus.INITIALIZING)

    def moved(self, status: CheckoutStatus, **changes: object) -> CheckoutSession:
        return dataclasses.replace(self, status=status, **changes)

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self.cart.items if self.cart is not None else ()

    @property
    def total_cents(self) -> int:
        return aggregate_total(self.items)

    @property
    def item_count(self) -> int:
        return item_count(self.items)

    @property
    def can_submit(self) -> bool:
        return self.status == CheckoutStatus.AWAITING_PAYMENT and self.client_secret is not None

    @property
    def recovery(self) -> RecoveryAction | None:
        match self.status:
            case CheckoutStatus.CART_EMPTY:
                return RecoveryAction.RETURN_TO_SHOPPING
            case CheckoutStatus.FAILED:
                return RecoveryAction.RETRY_CHECKOUT
            case _:
                return None


@dataclass(frozen=True, slots=True)
class CheckoutView:
    """What the checkout screen renders. Derived, never stored."""

    status: CheckoutStatus
    items: tuple[CartLineItem, ...]
    total_cents: int
    total: str
    reason: str | None
    message: str | None
    can_submit: bool
    can_retry: bool
    recovery: RecoveryAction | None


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Capability — External, Opaque
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentSucceeded:
    payment_intent_id: str | None = None


@dataclass(frozen=True, slots=True)
class PaymentNeedsRetry:
    """Recoverable: the shopper may fix the method and resubmit."""

    status: str


@dataclass(frozen=True, slots=True)
class PaymentFailed:
    """Unrecoverable: message is the processor's, shown verbatim."""

    message: str
    code: str | None = None


type PaymentOutcome = PaymentSucceeded | PaymentNeedsRetry | PaymentFailed


class PaymentCapability(Protocol):
    """
    The payment widget, seen from the core.

    Takes the client secret of the current intent and settles with one of
    the three outcomes. May raise; raising counts as PaymentFailed.
    """

    async def confirm(self, client_secret: str) -> PaymentOutcome: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Step Errors — Initialisation Protocol
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EmptyCart:
    """Not a failure: the cart has no items, so no intent is requested."""

    cart: CartSnapshot


@dataclass(frozen=True, slots=True)
class StepError:
    reason: str
    cause: ApiError | None = None


type InitError = EmptyCart | StepError


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Error — Rejected Commands
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    NO_SESSION = auto()
    INVALID_STATE = auto()
    SUPERSEDED = auto()
    NO_PAYMENTS = auto()


@dataclass(frozen=True, slots=True)
class CheckoutError:
    kind: CheckoutErrorKind
    message: str


class CheckoutErrors:
    @staticmethod
    def no_session() -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.NO_SESSION, "No checkout in progress")

    @staticmethod
    def invalid_state(status: CheckoutStatus) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INVALID_STATE, f"Cannot do that while {status.value}"
        )

    @staticmethod
    def superseded() -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.SUPERSEDED, "Checkout was restarted")

    @staticmethod
    def no_payments() -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.NO_PAYMENTS, "No payment method available")


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutStatus",
    "RecoveryAction",
    "CheckoutSession",
    "CheckoutView",
    "PaymentSucceeded",
    "PaymentNeedsRetry",
    "PaymentFailed",
    "PaymentOutcome",
    "PaymentCapability",
    "EmptyCart",
    "StepError",
    "InitError",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutErrors",
)
