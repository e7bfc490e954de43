"""
Checkout orchestrator — drives one checkout attempt at a time.

Initialisation is a two-step protocol (fetch cart → create payment intent);
submission hands the intent's client secret to the payment capability.
Every await is followed by a generation check so results of a superseded
or cancelled attempt never touch the current session.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from storefront import lift as L
from storefront._types import CartSnapshot
from storefront.api import Api, PaymentIntent, parse_cart, parse_payment_intent
from storefront.cart import aggregate_total, format_cents
from storefront.checkout._protocol import (
    ProtocolStep,
    ProtocolResult,
    ProtocolFailure,
    run_protocol,
)
from storefront.checkout._types import (
    CheckoutStatus,
    CheckoutSession,
    CheckoutView,
    CheckoutError,
    CheckoutErrors,
    PaymentCapability,
    PaymentSucceeded,
    PaymentNeedsRetry,
    PaymentFailed,
    EmptyCart,
    StepError,
    InitError,
)
from storefront.log import get_logger

logger = get_logger(__name__)

CART_EMPTY = "Your cart is empty"
LOAD_FAILED = "Failed to load checkout"
MISSING_ORDER = "Cart has no id"
PAYMENT_SUCCEEDED = "Payment succeeded!"
PAYMENT_PROCESSING = "Payment is processing..."
PAYMENT_DECLINED = "Payment failed"
PAYMENT_UNKNOWN = "Something happened."

_RETRY_MESSAGES = {
    "requires_payment_method": PAYMENT_DECLINED,
    "processing": PAYMENT_PROCESSING,
}


def retry_message(status: str) -> str:
    return _RETRY_MESSAGES.get(status, PAYMENT_UNKNOWN)


class CheckoutOrchestrator:
    """
    One active checkout attempt per orchestrator.

    begin() supersedes whatever attempt came before it, except while a
    payment is being submitted. cancel() drops the attempt; anything still
    in flight for it resolves into nothing.

    The payment capability can be fixed at construction or handed to each
    begin(); a capability passed to begin() serves that attempt and every
    later one that does not bring its own.
    """

    def __init__(
        self,
        api: Api,
        payments: PaymentCapability | None = None,
        currency: str = "usd",
    ) -> None:
        self._api = api
        self._payments = payments
        self._currency = currency
        self._generation = 0
        self._session: CheckoutSession | None = None

    @property
    def session(self) -> CheckoutSession | None:
        return self._session

    @property
    def currency(self) -> str:
        return self._currency

    def _current(self, generation: int) -> CheckoutSession | None:
        session = self._session
        if session is not None and session.generation == generation:
            return session
        return None

    # ───────────────────────────────────────────────────────────────────────────
    # Initialisation
    # ───────────────────────────────────────────────────────────────────────────

    async def begin(
        self,
        cart_id: str | None = None,
        payments: PaymentCapability | None = None,
    ) -> Result[CheckoutSession, CheckoutError]:
        previous = self._session
        if previous is not None and previous.status == CheckoutStatus.SUBMITTING:
            return Error(CheckoutErrors.invalid_state(previous.status))
        if payments is not None:
            self._payments = payments
        if self._payments is None:
            return Error(CheckoutErrors.no_payments())
        if previous is not None and not previous.status.is_terminal:
            logger.info("Superseding checkout attempt", generation=previous.generation)

        self._generation += 1
        generation = self._generation
        self._session = CheckoutSession.start(cart_id, generation)
        logger.debug("Checkout started", generation=generation, cart_id=cart_id)

        protocol = ProtocolStep(
            "fetch_cart",
            L.deferred(lambda: self._load_cart(generation)),
        ).then(lambda cart: ProtocolStep(
            "create_payment_intent",
            L.deferred(lambda: self._create_intent(cart, cart_id)),
        ))

        outcome = await run_protocol(protocol, proceed=lambda: self._current(generation) is not None)

        session = self._current(generation)
        if session is None:
            logger.debug("Discarding superseded checkout", generation=generation)
            return Error(CheckoutErrors.superseded())

        match outcome:
            case Ok(ProtocolResult(value=(cart, intent))):
                session = session.moved(
                    CheckoutStatus.AWAITING_PAYMENT,
                    cart=cart,
                    client_secret=intent.client_secret,
                )
                logger.info(
                    "Checkout ready",
                    generation=generation,
                    amount=session.total_cents,
                    payment_id=intent.payment_id,
                )
            case Error(ProtocolFailure(error=EmptyCart(cart=cart))):
                session = session.moved(CheckoutStatus.CART_EMPTY, cart=cart, message=CART_EMPTY)
                logger.info("Checkout on empty cart", generation=generation)
            case Error(ProtocolFailure(step=step, step_failed=index, error=StepError(reason=reason, cause=cause))):
                logger.warning(
                    "Checkout failed",
                    generation=generation,
                    step=step,
                    step_failed=index,
                    reason=reason,
                    kind=cause.kind.name if cause is not None else None,
                    detail=cause.detail if cause is not None else None,
                )
                session = session.moved(CheckoutStatus.FAILED, reason=reason, message=LOAD_FAILED)
            case _:
                return Error(CheckoutErrors.superseded())

        self._session = session
        return Ok(session)

    async def _load_cart(self, generation: int) -> Result[CartSnapshot, InitError]:
        match await self._api.get_cart():
            case Error(e):
                return Error(StepError(e.message, e))
            case Ok(body):
                pass

        match parse_cart(body):
            case Error(e):
                return Error(StepError(e.message, e))
            case Ok(cart):
                pass

        session = self._current(generation)
        if session is not None:
            self._session = session.moved(session.status, cart=cart)

        if not cart.items:
            return Error(EmptyCart(cart))
        return Ok(cart)

    async def _create_intent(
        self,
        cart: CartSnapshot,
        cart_id: str | None,
    ) -> Result[tuple[CartSnapshot, PaymentIntent], InitError]:
        order_id = cart.order_ref or cart_id
        if not order_id:
            return Error(StepError(MISSING_ORDER))

        amount = aggregate_total(cart.items)
        match await self._api.create_payment_intent(order_id, amount, self._currency):
            case Error(e):
                return Error(StepError(e.message, e))
            case Ok(body):
                pass

        match parse_payment_intent(body):
            case Ok(intent):
                return Ok((cart, intent))
            case Error(e):
                return Error(StepError(e.message, e))

    # ───────────────────────────────────────────────────────────────────────────
    # Submission
    # ───────────────────────────────────────────────────────────────────────────

    async def submit(self) -> Result[CheckoutSession, CheckoutError]:
        session = self._session
        if session is None:
            return Error(CheckoutErrors.no_session())
        secret = session.client_secret
        if session.status != CheckoutStatus.AWAITING_PAYMENT or secret is None:
            return Error(CheckoutErrors.invalid_state(session.status))
        payments = self._payments
        if payments is None:
            return Error(CheckoutErrors.no_payments())

        generation = session.generation
        self._session = session.moved(CheckoutStatus.SUBMITTING, reason=None, message=None)
        logger.info("Submitting payment", generation=generation)

        result = await L.catching_async(
            lambda: payments.confirm(secret),
            on_error=lambda e: PaymentFailed(str(e) or PAYMENT_DECLINED),
        )

        current = self._current(generation)
        if current is None:
            logger.debug("Discarding payment outcome of superseded checkout", generation=generation)
            return Error(CheckoutErrors.superseded())

        match result:
            case Ok(PaymentSucceeded()):
                current = current.moved(CheckoutStatus.SUCCEEDED, message=PAYMENT_SUCCEEDED)
                logger.info("Payment succeeded", generation=generation)
            case Ok(PaymentNeedsRetry(status=status)):
                current = current.moved(
                    CheckoutStatus.AWAITING_PAYMENT,
                    reason=status,
                    message=retry_message(status),
                )
                logger.info("Payment needs retry", generation=generation, status=status)
            case Ok(PaymentFailed(message=message)) | Error(PaymentFailed(message=message)):
                current = current.moved(CheckoutStatus.FAILED, reason=message, message=message)
                logger.warning("Payment failed", generation=generation, reason=message)
            case _:
                current = current.moved(
                    CheckoutStatus.FAILED,
                    reason=PAYMENT_UNKNOWN,
                    message=PAYMENT_UNKNOWN,
                )
                logger.error("Unexpected payment outcome", generation=generation, outcome=repr(result))

        self._session = current
        return Ok(current)

    # ───────────────────────────────────────────────────────────────────────────
    # Leaving / Presentation
    # ───────────────────────────────────────────────────────────────────────────

    def cancel(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        logger.info("Checkout cancelled", generation=session.generation, status=session.status.value)

    def view(self) -> CheckoutView | None:
        session = self._session
        if session is None:
            return None
        return CheckoutView(
            status=session.status,
            items=session.items,
            total_cents=session.total_cents,
            total=format_cents(session.total_cents, self._currency),
            reason=session.reason,
            message=session.message,
            can_submit=session.can_submit,
            can_retry=session.status == CheckoutStatus.FAILED,
            recovery=session.recovery,
        )


__all__ = (
    "CheckoutOrchestrator",
    "retry_message",
    "CART_EMPTY",
    "LOAD_FAILED",
    "PAYMENT_SUCCEEDED",
    "PAYMENT_PROCESSING",
    "PAYMENT_DECLINED",
    "PAYMENT_UNKNOWN",
)
