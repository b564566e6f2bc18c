"""Tests for the event-sourced Payment aggregate."""

from datetime import UTC, datetime, timedelta

import pytest

from storefront.payments.gateway.port import PaymentLink
from storefront.payments.payment.events import PaymentCancelled, PaymentFailed, PaymentSucceeded
from storefront.payments.payment.payment import Payment, PaymentStatus, generate_order_code, link_validity
from storefront.shared.errors import DomainError, InvalidTransition


def _payment(method="vietqr", expires_in=timedelta(hours=24)):
    return Payment.create(
        order_id="order-1",
        order_number="ORD-1",
        user_id="user-1",
        method=method,
        gateway_name="fake",
        amount=300000.0,
        currency="VND",
        link=PaymentLink(
            order_code=123456,
            checkout_url="https://pay.fake.local/web/123456",
            qr_code="FAKEQR123456",
            expires_at=datetime.now(UTC) + expires_in,
        ),
    )


class TestPaymentCreation:
    def test_starts_pending(self):
        payment = _payment()
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.order_code == 123456
        assert payment.checkout_url.endswith("123456")

    def test_link_validity(self):
        assert link_validity("cod") == timedelta(days=7)
        assert link_validity("vietqr") == timedelta(hours=24)

    def test_expiry(self):
        assert not _payment().is_expired()
        assert _payment(expires_in=timedelta(seconds=-1)).is_expired()

    def test_order_codes_are_numeric_and_distinct(self):
        codes = {generate_order_code() for _ in range(20)}
        assert all(isinstance(code, int) and code > 0 for code in codes)
        assert len(codes) > 1


class TestOutcomes:
    def test_paid(self):
        payment = _payment()
        assert payment.mark_paid(transaction_id="txn-1")
        assert payment.status == PaymentStatus.PAID.value
        assert payment.transaction_id == "txn-1"
        assert isinstance(payment._events[-1], PaymentSucceeded)

    def test_repeated_outcome_is_a_no_op(self):
        payment = _payment()
        payment.mark_paid()
        events = len(payment._events)
        assert payment.apply_outcome("paid") is False
        assert len(payment._events) == events

    def test_failed_then_late_transfer(self):
        payment = _payment()
        payment.mark_failed("Timeout")
        assert isinstance(payment._events[-1], PaymentFailed)
        assert payment.failure_reason == "Timeout"

        payment.mark_paid()
        assert payment.status == PaymentStatus.PAID.value
        assert payment.failure_reason is None

    def test_paid_is_terminal(self):
        payment = _payment()
        payment.mark_paid()
        with pytest.raises(InvalidTransition):
            payment.cancel("Too late")
        with pytest.raises(InvalidTransition):
            payment.mark_failed("Nope")

    def test_cancel(self):
        payment = _payment()
        assert payment.cancel("Changed my mind")
        assert isinstance(payment._events[-1], PaymentCancelled)
        assert payment.cancel("Again") is False

    def test_pending_outcome_changes_nothing(self):
        assert _payment().apply_outcome("pending") is False

    def test_unknown_status(self):
        with pytest.raises(DomainError):
            _payment().apply_outcome("refunded")
