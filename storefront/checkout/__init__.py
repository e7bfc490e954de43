"""
Checkout — cart to payment intent to confirmed payment.

    from storefront import checkout as Co

    orchestrator = Co.CheckoutOrchestrator(api, payments, currency="usd")

    match await orchestrator.begin(cart_id):
        case Ok(session) if session.can_submit:
            await orchestrator.submit()
        case Ok(session):
            show(orchestrator.view())     # cart_empty / failed

    orchestrator.cancel()                 # leaving the page

payments is anything with `async confirm(client_secret) -> PaymentOutcome`.
"""

from storefront.checkout._types import (
    CheckoutStatus,
    RecoveryAction,
    CheckoutSession,
    CheckoutView,
    PaymentSucceeded,
    PaymentNeedsRetry,
    PaymentFailed,
    PaymentOutcome,
    PaymentCapability,
    EmptyCart,
    StepError,
    InitError,
    CheckoutErrorKind,
    CheckoutError,
    CheckoutErrors,
)
from storefront.checkout._protocol import (
    ProtocolStep,
    ProtocolResult,
    ProtocolFailure,
    run_protocol,
)
from storefront.checkout._orchestrator import (
    CheckoutOrchestrator,
    retry_message,
    CART_EMPTY,
    LOAD_FAILED,
    PAYMENT_SUCCEEDED,
    PAYMENT_PROCESSING,
    PAYMENT_DECLINED,
    PAYMENT_UNKNOWN,
)

__all__ = (
    # Session
    "CheckoutStatus",
    "RecoveryAction",
    "CheckoutSession",
    "CheckoutView",
    # Payment
    "PaymentSucceeded",
    "PaymentNeedsRetry",
    "PaymentFailed",
    "PaymentOutcome",
    "PaymentCapability",
    # Errors
    "EmptyCart",
    "StepError",
    "InitError",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutErrors",
    # Protocol
    "ProtocolStep",
    "ProtocolResult",
    "ProtocolFailure",
    "run_protocol",
    # Orchestrator
    "CheckoutOrchestrator",
    "retry_message",
    "CART_EMPTY",
    "LOAD_FAILED",
    "PAYMENT_SUCCEEDED",
    "PAYMENT_PROCESSING",
    "PAYMENT_DECLINED",
    "PAYMENT_UNKNOWN",
)
