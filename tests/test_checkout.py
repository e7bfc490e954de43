"""Tests for the checkout orchestrator."""
from __future__ import annotations

import asyncio

import pytest

from conftest import USER_ID, FakePayments, err_value, ok_value, settle
from storefront.api import ApiErrors, IntentRequest
from storefront.checkout import (
    CART_EMPTY,
    LOAD_FAILED,
    PAYMENT_DECLINED,
    PAYMENT_PROCESSING,
    PAYMENT_SUCCEEDED,
    PAYMENT_UNKNOWN,
    CheckoutErrorKind,
    CheckoutOrchestrator,
    CheckoutStatus,
    PaymentFailed,
    PaymentNeedsRetry,
    PaymentSucceeded,
    RecoveryAction,
)


@pytest.fixture
def shopper(api):
    api.sign_in(USER_ID)
    api.set_cart(USER_ID, [{"product_id": 1, "price_cents": 500, "quantity": 2}])
    return api


# ═══════════════════════════════════════════════════════════════════════════════
# Initialisation
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_begin_requests_intent_for_cart_total(shopper, orchestrator):
    session = ok_value(await orchestrator.begin("cart-u1"))

    assert session.status == CheckoutStatus.AWAITING_PAYMENT
    assert session.client_secret is not None
    assert session.total_cents == 1000
    assert shopper.intents == [IntentRequest(order_id=f"cart-{USER_ID}", amount=1000, currency="usd")]
    assert shopper.calls == ["get_cart", "create_payment_intent"]


@pytest.mark.asyncio
async def test_begin_on_empty_cart_requests_no_intent(api, orchestrator):
    api.sign_in(USER_ID)

    session = ok_value(await orchestrator.begin())

    assert session.status == CheckoutStatus.CART_EMPTY
    assert session.message == CART_EMPTY
    assert session.recovery == RecoveryAction.RETURN_TO_SHOPPING
    assert api.count("create_payment_intent") == 0


@pytest.mark.asyncio
async def test_cart_fetch_failure_fails_checkout(shopper, orchestrator):
    shopper.fail("get_cart", ApiErrors.http(502, "bad gateway"))

    session = ok_value(await orchestrator.begin())

    assert session.status == CheckoutStatus.FAILED
    assert session.message == LOAD_FAILED
    assert session.reason == "Service error, please try again"
    assert session.recovery == RecoveryAction.RETRY_CHECKOUT
    assert shopper.count("create_payment_intent") == 0


@pytest.mark.asyncio
async def test_checkout_without_identity_fails(api, orchestrator):
    session = ok_value(await orchestrator.begin())

    assert session.status == CheckoutStatus.FAILED
    assert session.reason == "Not authorized"


@pytest.mark.asyncio
async def test_missing_client_secret_fails_checkout(shopper, orchestrator):
    shopper.respond("create_payment_intent", {"payment_id": "p1", "status": "pending"})

    session = ok_value(await orchestrator.begin())

    assert session.status == CheckoutStatus.FAILED
    assert session.reason == "No client secret received"
    assert session.client_secret is None
    assert session.total_cents == 1000


@pytest.mark.asyncio
async def test_intent_rejection_fails_checkout(shopper, orchestrator):
    shopper.fail("create_payment_intent", ApiErrors.http(400, "invalid request fields"))

    session = ok_value(await orchestrator.begin())

    assert session.status == CheckoutStatus.FAILED
    assert session.can_submit is False


@pytest.mark.asyncio
async def test_order_id_falls_back_to_owner(shopper, orchestrator):
    shopper.respond("get_cart", {"user_id": USER_ID, "items": [{"product_id": "1", "price_cents": 300}]})

    ok_value(await orchestrator.begin())

    assert shopper.intents[0].order_id == USER_ID
    assert shopper.intents[0].amount == 300


# ═══════════════════════════════════════════════════════════════════════════════
# Submission
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_submit_success(shopper, orchestrator, payments):
    started = ok_value(await orchestrator.begin())

    session = ok_value(await orchestrator.submit())

    assert session.status == CheckoutStatus.SUCCEEDED
    assert session.message == PAYMENT_SUCCEEDED
    assert payments.secrets == [started.client_secret]


@pytest.mark.asyncio
async def test_declined_method_allows_resubmission(shopper, orchestrator, payments):
    payments.outcomes = [PaymentNeedsRetry("requires_payment_method"), PaymentSucceeded()]
    await orchestrator.begin()

    session = ok_value(await orchestrator.submit())

    assert session.status == CheckoutStatus.AWAITING_PAYMENT
    assert session.message == PAYMENT_DECLINED
    assert session.can_submit is True

    session = ok_value(await orchestrator.submit())
    assert session.status == CheckoutStatus.SUCCEEDED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "message"),
    [("processing", PAYMENT_PROCESSING), ("requires_action", PAYMENT_UNKNOWN)],
)
async def test_retry_messages_follow_processor_status(shopper, orchestrator, payments, status, message):
    payments.outcomes = [PaymentNeedsRetry(status)]
    await orchestrator.begin()

    session = ok_value(await orchestrator.submit())

    assert session.status == CheckoutStatus.AWAITING_PAYMENT
    assert session.message == message


@pytest.mark.asyncio
async def test_unrecoverable_failure_keeps_processor_message(shopper, orchestrator, payments):
    payments.outcomes = [PaymentFailed("Your card was declined.", code="card_declined")]
    await orchestrator.begin()

    session = ok_value(await orchestrator.submit())

    assert session.status == CheckoutStatus.FAILED
    assert session.reason == "Your card was declined."
    assert session.message == "Your card was declined."


@pytest.mark.asyncio
async def test_raising_capability_fails_checkout(shopper, orchestrator, payments):
    payments.outcomes = [RuntimeError("widget crashed")]
    await orchestrator.begin()

    session = ok_value(await orchestrator.submit())

    assert session.status == CheckoutStatus.FAILED
    assert session.reason == "widget crashed"


@pytest.mark.asyncio
async def test_submit_without_session_is_rejected(orchestrator):
    error = err_value(await orchestrator.submit())

    assert error.kind == CheckoutErrorKind.NO_SESSION


@pytest.mark.asyncio
async def test_submit_outside_awaiting_payment_changes_nothing(api, orchestrator, payments):
    api.sign_in(USER_ID)
    before = ok_value(await orchestrator.begin())

    error = err_value(await orchestrator.submit())

    assert error.kind == CheckoutErrorKind.INVALID_STATE
    assert orchestrator.session == before
    assert payments.secrets == []


# ═══════════════════════════════════════════════════════════════════════════════
# Concurrency
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_second_begin_supersedes_first(shopper, orchestrator):
    first_gate = shopper.hold("get_cart")
    first = asyncio.create_task(orchestrator.begin())
    await settle()

    shopper.hold("get_cart").set()
    second = ok_value(await orchestrator.begin())

    first_gate.set()
    error = err_value(await first)

    assert error.kind == CheckoutErrorKind.SUPERSEDED
    assert orchestrator.session == second
    assert second.status == CheckoutStatus.AWAITING_PAYMENT
    assert len(shopper.intents) == 1


@pytest.mark.asyncio
async def test_cancel_during_begin_drops_late_results(shopper, orchestrator):
    gate = shopper.hold("get_cart")
    beginning = asyncio.create_task(orchestrator.begin())
    await settle()

    orchestrator.cancel()
    gate.set()
    error = err_value(await beginning)

    assert error.kind == CheckoutErrorKind.SUPERSEDED
    assert orchestrator.session is None
    assert shopper.count("create_payment_intent") == 0


@pytest.mark.asyncio
async def test_superseded_submission_never_reaches_terminal_state(shopper, api):
    payments = FakePayments(gate=asyncio.Event())
    orchestrator = CheckoutOrchestrator(api, payments)
    await orchestrator.begin()

    submitting = asyncio.create_task(orchestrator.submit())
    await settle()
    assert orchestrator.session is not None
    assert orchestrator.session.status == CheckoutStatus.SUBMITTING

    orchestrator.cancel()
    payments.gate.set()
    error = err_value(await submitting)

    assert error.kind == CheckoutErrorKind.SUPERSEDED
    assert orchestrator.session is None


@pytest.mark.asyncio
async def test_begin_while_submitting_is_rejected(shopper, api):
    payments = FakePayments(gate=asyncio.Event())
    orchestrator = CheckoutOrchestrator(api, payments)
    await orchestrator.begin()
    submitting = asyncio.create_task(orchestrator.submit())
    await settle()

    error = err_value(await orchestrator.begin())
    payments.gate.set()
    session = ok_value(await submitting)

    assert error.kind == CheckoutErrorKind.INVALID_STATE
    assert session.status == CheckoutStatus.SUCCEEDED


# ═══════════════════════════════════════════════════════════════════════════════
# View
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_view_renders_current_session(shopper, orchestrator):
    assert orchestrator.view() is None

    await orchestrator.begin()
    view = orchestrator.view()

    assert view is not None
    assert view.status == CheckoutStatus.AWAITING_PAYMENT
    assert view.total == "$10.00"
    assert view.total_cents == 1000
    assert [i.product_id for i in view.items] == ["1"]
    assert view.can_submit is True
    assert view.can_retry is False
    assert view.recovery is None


@pytest.mark.asyncio
async def test_view_offers_retry_after_failure(shopper, orchestrator):
    shopper.fail("create_payment_intent")
    await orchestrator.begin()

    view = orchestrator.view()

    assert view is not None
    assert view.can_retry is True
    assert view.can_submit is False
    assert view.message == LOAD_FAILED
