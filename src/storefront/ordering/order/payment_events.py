"""Ordering reacts to Payment events by moving the order's payment status."""

from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.ordering.order.order import Order, PaymentStatus
from storefront.ordering.order.payment import RecordOrderPayment
from storefront.payments.payment.events import PaymentCancelled, PaymentFailed, PaymentSucceeded
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Order, stream_category="storefront::payment")
class OrderPaymentEventHandler:
    """Mirrors payment outcomes onto the order."""

    def _record(self, event, payment_status: str) -> None:
        logger.info(
            "Recording payment outcome on order",
            order_id=str(event.order_id),
            payment_id=str(event.payment_id),
            payment_status=payment_status,
        )
        current_domain.process(
            RecordOrderPayment(
                order_id=event.order_id,
                payment_status=payment_status,
                payment_id=event.payment_id,
            ),
            asynchronous=False,
        )

    @handle(PaymentSucceeded)
    def on_payment_succeeded(self, event: PaymentSucceeded) -> None:
        self._record(event, PaymentStatus.PAID.value)

    @handle(PaymentFailed)
    def on_payment_failed(self, event: PaymentFailed) -> None:
        self._record(event, PaymentStatus.FAILED.value)

    @handle(PaymentCancelled)
    def on_payment_cancelled(self, event: PaymentCancelled) -> None:
        self._record(event, PaymentStatus.CANCELLED.value)
