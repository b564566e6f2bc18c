"""Application tests for payment links, status sync, cancellation and webhooks."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean.utils.globals import current_domain

from storefront.ordering.order.creation import CreateOrder
from storefront.ordering.order.lifecycle import CancelOrder, ConfirmOrder, DeliverOrder, ShipOrder
from storefront.ordering.queries import load_order
from storefront.payments.gateway import get_gateway
from storefront.payments.payment.link import CreatePaymentLink
from storefront.payments.payment.processing import CancelPayment, ProcessPayment
from storefront.payments.payment.webhook import ProcessPaymentWebhook
from storefront.payments.queries import load_payment, payments_for_order
from storefront.shared.errors import BusinessRuleViolation, InvalidTransition, PaymentGatewayError, Unauthorized

CUSTOMER = {"actor_id": "user-1"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def place(make_product):
    def _place(method="vietqr", price=100000.0, quantity=3):
        product_id = make_product(price=price)
        return _process(
            CreateOrder(
                items=json.dumps([{"product_id": product_id, "quantity": quantity}]),
                payment_method=method,
                **CUSTOMER,
            )
        )

    return _place


def _link(order_id, method=None, **actor):
    return _process(CreatePaymentLink(order_id=order_id, payment_method=method, **(actor or CUSTOMER)))


def _webhook(payment, status="paid", amount=None):
    return _process(
        ProcessPaymentWebhook(
            order_code=payment.order_code,
            status=status,
            amount=payment.amount if amount is None else amount,
            transaction_id="FT-1",
        )
    )


class TestCreatePaymentLink:
    def test_vietqr_link(self, place):
        order_id = place()
        payment = load_payment(_link(order_id))

        assert payment.status == "pending"
        assert payment.method == "vietqr"
        assert payment.gateway_name == "fake"
        assert payment.amount == 300000.0
        assert payment.checkout_url == f"https://pay.fake.local/web/{payment.order_code}"
        assert payment.expires_at - datetime.now(UTC) <= timedelta(hours=24)

    def test_pending_link_is_reused(self, place):
        order_id = place()
        first = _link(order_id)
        assert _link(order_id) == first
        assert len(get_gateway("vietqr").calls) == 1

    def test_cod_link(self, place):
        order_id = place(method="cod")
        payment = load_payment(_link(order_id))
        assert payment.gateway_name == "cod"
        assert payment.reference == f"COD-{payment.order_code}"
        assert payment.expires_at - datetime.now(UTC) > timedelta(days=6)

    def test_only_the_owner(self, place):
        order_id = place()
        with pytest.raises(Unauthorized):
            _link(order_id, actor_id="user-2")

    def test_cancelled_order(self, place):
        order_id = place()
        _process(CancelOrder(order_id=order_id, reason="Changed my mind", **CUSTOMER))
        with pytest.raises(BusinessRuleViolation):
            _link(order_id)

    def test_paid_order(self, place):
        order_id = place()
        _webhook(load_payment(_link(order_id)))
        with pytest.raises(BusinessRuleViolation):
            _link(order_id)

    def test_gateway_failure_stores_nothing(self, place):
        order_id = place()
        get_gateway("vietqr").configure(should_succeed=False, failure_reason="Bank offline")
        with pytest.raises(PaymentGatewayError):
            _link(order_id)
        assert payments_for_order(order_id) == []


class TestWebhook:
    def test_paid_updates_order(self, place):
        order_id = place()
        payment = load_payment(_link(order_id))

        assert _webhook(payment) == "paid"
        assert load_payment(payment.id).transaction_id == "FT-1"
        assert load_order(order_id).payment_status == "paid"

    def test_unknown_order_code(self):
        assert _process(ProcessPaymentWebhook(order_code=999, status="paid")) == "ignored"

    def test_underpayment_fails(self, place):
        order_id = place()
        payment = load_payment(_link(order_id))

        assert _webhook(payment, amount=1000.0) == "failed"
        assert "1000.0" in load_payment(payment.id).failure_reason
        assert load_order(order_id).payment_status == "failed"

    def test_repeat_after_paid(self, place):
        payment = load_payment(_link(place()))
        _webhook(payment)
        assert _webhook(payment, status="failed") == "paid"

    def test_late_transfer_after_failure(self, place):
        order_id = place()
        payment = load_payment(_link(order_id))
        _webhook(payment, status="failed")
        assert _webhook(payment) == "paid"
        assert load_order(order_id).payment_status == "paid"


class TestProcessPayment:
    def test_syncs_from_gateway(self, place):
        payment = load_payment(_link(place()))
        assert _process(ProcessPayment(order_code=payment.order_code, **CUSTOMER)) == "paid"

    def test_settled_payment_skips_gateway(self, place):
        payment = load_payment(_link(place()))
        _process(ProcessPayment(order_code=payment.order_code, **CUSTOMER))
        calls = len(get_gateway("vietqr").calls)

        assert _process(ProcessPayment(order_code=payment.order_code, **CUSTOMER)) == "paid"
        assert len(get_gateway("vietqr").calls) == calls

    def test_gateway_still_pending(self, place):
        payment = load_payment(_link(place()))
        get_gateway("vietqr").configure(should_succeed=True, payment_status="pending")
        assert _process(ProcessPayment(order_code=payment.order_code, **CUSTOMER)) == "pending"


class TestCancelPayment:
    def test_cancel_is_idempotent(self, place):
        order_id = place()
        payment = load_payment(_link(order_id))

        assert _process(CancelPayment(order_code=payment.order_code, **CUSTOMER)) == "cancelled"
        assert _process(CancelPayment(order_code=payment.order_code, **CUSTOMER)) == "cancelled"
        cancels = [c for c in get_gateway("vietqr").calls if c["method"] == "cancel_payment"]
        assert len(cancels) == 1
        assert load_order(order_id).payment_status == "cancelled"

    def test_paid_cannot_be_cancelled(self, place):
        payment = load_payment(_link(place()))
        _webhook(payment)
        with pytest.raises(InvalidTransition):
            _process(CancelPayment(order_code=payment.order_code, **CUSTOMER))

    def test_new_link_after_cancel(self, place):
        order_id = place()
        first = load_payment(_link(order_id))
        _process(CancelPayment(order_code=first.order_code, **CUSTOMER))
        assert _link(order_id) != str(first.id)


class TestOrderDrivenSettlement:
    def test_cod_collected_on_delivery(self, place, staff):
        order_id = place(method="cod")
        payment_id = _link(order_id)

        _process(ConfirmOrder(order_id=order_id, **staff))
        _process(ShipOrder(order_id=order_id, tracking_number="VN1", **staff))
        _process(DeliverOrder(order_id=order_id, **staff))

        assert load_payment(payment_id).status == "paid"
        assert load_order(order_id).payment_status == "paid"

    def test_cancelled_order_withdraws_link(self, place):
        order_id = place()
        payment_id = _link(order_id)

        _process(CancelOrder(order_id=order_id, reason="Changed my mind", **CUSTOMER))
        assert load_payment(payment_id).status == "cancelled"
