"""Payment record: one row per payment, keyed for gateway order-code and order lookups."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.payments.payment.events import (
    PaymentCancelled,
    PaymentFailed,
    PaymentLinkCreated,
    PaymentSucceeded,
)
from storefront.payments.payment.payment import Payment, PaymentStatus


@storefront.projection
class PaymentRecord:
    payment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    order_number = String(max_length=30)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(max_length=20)
    amount = Float(default=0.0)
    currency = String(max_length=3, default="VND")
    status = String(required=True, max_length=20)
    checkout_url = Text()
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=PaymentRecord, aggregates=[Payment])
class PaymentRecordProjector:
    @on(PaymentLinkCreated)
    def on_payment_link_created(self, event):
        current_domain.repository_for(PaymentRecord).add(
            PaymentRecord(
                payment_id=event.payment_id,
                order_id=event.order_id,
                order_number=event.order_number,
                user_id=event.user_id,
                order_code=event.order_code,
                method=event.method,
                amount=event.amount,
                currency=event.currency,
                status=PaymentStatus.PENDING.value,
                checkout_url=event.checkout_url,
                expires_at=event.expires_at,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(PaymentSucceeded)
    def on_payment_succeeded(self, event):
        repo = current_domain.repository_for(PaymentRecord)
        record = repo.get(event.payment_id)
        record.status = PaymentStatus.PAID.value
        record.transaction_id = event.transaction_id
        record.failure_reason = None
        record.updated_at = event.paid_at
        repo.add(record)

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        repo = current_domain.repository_for(PaymentRecord)
        record = repo.get(event.payment_id)
        record.status = PaymentStatus.FAILED.value
        record.failure_reason = event.reason
        record.updated_at = event.failed_at
        repo.add(record)

    @on(PaymentCancelled)
    def on_payment_cancelled(self, event):
        repo = current_domain.repository_for(PaymentRecord)
        record = repo.get(event.payment_id)
        record.status = PaymentStatus.CANCELLED.value
        record.updated_at = event.cancelled_at
        repo.add(record)
