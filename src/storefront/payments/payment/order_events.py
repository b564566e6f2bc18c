"""Payments react to Order events.

A delivered cash-on-delivery order settles its pending COD payment; a
cancelled order withdraws whatever payment requests are still open.
"""

from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.ordering.order.events import OrderCancelled, OrderDelivered
from storefront.payments.gateway import get_gateway
from storefront.payments.payment.payment import Payment, PaymentStatus
from storefront.payments.queries import load_payment, payments_for_order
from storefront.shared.errors import PaymentGatewayError
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Payment, stream_category="storefront::order")
class PaymentOrderEventHandler:
    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        repo = current_domain.repository_for(Payment)
        for record in payments_for_order(event.order_id):
            if record.method != "cod" or record.status != PaymentStatus.PENDING.value:
                continue
            payment = load_payment(record.payment_id)
            payment.mark_paid(transaction_id=f"COD-{payment.order_code}", reference=event.order_number)
            repo.add(payment)
            logger.info("COD payment collected", payment_id=str(payment.id), order_id=str(event.order_id))

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        repo = current_domain.repository_for(Payment)
        for record in payments_for_order(event.order_id):
            if record.status not in (PaymentStatus.PENDING.value, PaymentStatus.FAILED.value):
                continue
            payment = load_payment(record.payment_id)
            try:
                get_gateway(payment.method).cancel_payment(payment.order_code, f"Order cancelled: {event.reason}")
            except PaymentGatewayError:
                # The link expires on its own; the local record is still withdrawn.
                logger.warning("Gateway cancellation failed", payment_id=str(payment.id), exc_info=True)
            payment.cancel(event.reason)
            repo.add(payment)
            logger.info("Payment withdrawn for cancelled order", payment_id=str(payment.id))
