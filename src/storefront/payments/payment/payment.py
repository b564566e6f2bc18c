"""Payment aggregate (Event Sourced): one payment request for one order.

The payment's status is also the dedup record for gateway callbacks: an
outcome that is already recorded is a no-op, so repeated webhooks or status
polls with the same result never double-charge or double-cancel.

State Machine:
    PENDING → PAID
    PENDING → FAILED → PAID (late transfer)
    PENDING/FAILED → CANCELLED
    PAID and CANCELLED are terminal.
"""

import secrets
import time
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import apply
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.payments.gateway.port import PaymentLink
from storefront.payments.payment.events import (
    PaymentCancelled,
    PaymentFailed,
    PaymentLinkCreated,
    PaymentSucceeded,
)
from storefront.shared.errors import DomainError, InvalidTransition

COD_LINK_VALIDITY = timedelta(days=7)
VIETQR_LINK_VALIDITY = timedelta(hours=24)


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
    PaymentStatus.FAILED: {PaymentStatus.PAID, PaymentStatus.CANCELLED},
    PaymentStatus.PAID: set(),  # Terminal
    PaymentStatus.CANCELLED: set(),  # Terminal
}


def link_validity(method: str) -> timedelta:
    return COD_LINK_VALIDITY if method == "cod" else VIETQR_LINK_VALIDITY


def generate_order_code() -> int:
    """Numeric gateway order code: epoch milliseconds with two random digits."""
    return int(time.time() * 1000) * 100 + secrets.randbelow(100)


@storefront.aggregate(is_event_sourced=True)
class Payment:
    order_id = Identifier(required=True)
    order_number = String(max_length=30)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(max_length=20, required=True)
    gateway_name = String(max_length=50)
    amount = Float(default=0.0)
    currency = String(max_length=3, default="VND")
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    checkout_url = Text()
    qr_code = Text()
    account_number = String(max_length=50)
    account_name = String(max_length=255)
    reference = String(max_length=255)
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    cancellation_reason = String(max_length=500)
    expires_at = DateTime()
    paid_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order_id, order_number, user_id, method, gateway_name, amount, currency, link: PaymentLink):
        payment = cls._create_new()
        payment.raise_(
            PaymentLinkCreated(
                payment_id=str(payment.id),
                order_id=str(order_id),
                order_number=order_number,
                user_id=str(user_id),
                order_code=link.order_code,
                method=method,
                gateway_name=gateway_name,
                amount=amount,
                currency=currency,
                checkout_url=link.checkout_url,
                qr_code=link.qr_code,
                account_number=link.account_number,
                account_name=link.account_name,
                reference=link.reference,
                expires_at=link.expires_at,
                created_at=datetime.now(UTC),
            )
        )
        return payment

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING.value

    def is_expired(self, moment: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        moment = moment or datetime.now(UTC)
        expires_at = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return moment >= expires_at

    def _event_fields(self) -> dict:
        return {
            "payment_id": str(self.id),
            "order_id": str(self.order_id),
            "order_number": self.order_number,
            "user_id": str(self.user_id),
            "order_code": self.order_code,
            "method": self.method,
        }

    def _move_to(self, target: PaymentStatus) -> bool:
        """Check a transition. False means the payment is already in ``target``."""
        current = PaymentStatus(self.status)
        if current == target:
            return False
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot move payment from {current.value} to {target.value}")
        return True

    # -------------------------------------------------------------------
    # Outcomes
    # -------------------------------------------------------------------
    def mark_paid(self, transaction_id=None, reference=None) -> bool:
        if not self._move_to(PaymentStatus.PAID):
            return False
        self.raise_(
            PaymentSucceeded(
                amount=self.amount,
                transaction_id=transaction_id,
                reference=reference,
                paid_at=datetime.now(UTC),
                **self._event_fields(),
            )
        )
        return True

    def mark_failed(self, reason) -> bool:
        if not self._move_to(PaymentStatus.FAILED):
            return False
        self.raise_(
            PaymentFailed(reason=reason or "Payment failed", failed_at=datetime.now(UTC), **self._event_fields())
        )
        return True

    def cancel(self, reason=None) -> bool:
        if not self._move_to(PaymentStatus.CANCELLED):
            return False
        self.raise_(PaymentCancelled(reason=reason, cancelled_at=datetime.now(UTC), **self._event_fields()))
        return True

    def apply_outcome(self, status: str, transaction_id=None, reference=None, reason=None) -> bool:
        """Record a gateway-reported status. Returns True when something changed."""
        try:
            target = PaymentStatus(status)
        except ValueError:
            raise DomainError(f"Unknown payment status: {status}", field="status") from None

        if target == PaymentStatus.PAID:
            return self.mark_paid(transaction_id=transaction_id, reference=reference)
        if target == PaymentStatus.FAILED:
            return self.mark_failed(reason)
        if target == PaymentStatus.CANCELLED:
            return self.cancel(reason)
        return False

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_payment_link_created(self, event: PaymentLinkCreated):
        self.id = event.payment_id
        self.order_id = event.order_id
        self.order_number = event.order_number
        self.user_id = event.user_id
        self.order_code = event.order_code
        self.method = event.method
        self.gateway_name = event.gateway_name
        self.amount = event.amount
        self.currency = event.currency
        self.status = PaymentStatus.PENDING.value
        self.checkout_url = event.checkout_url
        self.qr_code = event.qr_code
        self.account_number = event.account_number
        self.account_name = event.account_name
        self.reference = event.reference
        self.expires_at = event.expires_at
        self.created_at = event.created_at
        self.updated_at = event.created_at

    @apply
    def _on_payment_succeeded(self, event: PaymentSucceeded):
        self.status = PaymentStatus.PAID.value
        self.transaction_id = event.transaction_id
        if event.reference:
            self.reference = event.reference
        self.failure_reason = None
        self.paid_at = event.paid_at
        self.updated_at = event.paid_at

    @apply
    def _on_payment_failed(self, event: PaymentFailed):
        self.status = PaymentStatus.FAILED.value
        self.failure_reason = event.reason
        self.updated_at = event.failed_at

    @apply
    def _on_payment_cancelled(self, event: PaymentCancelled):
        self.status = PaymentStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.cancelled_at = event.cancelled_at
        self.updated_at = event.cancelled_at
