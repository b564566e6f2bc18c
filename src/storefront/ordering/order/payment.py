"""Order payment status: command and handler.

Issued by the payment event handler; there is no HTTP route for it.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order, PaymentStatus
from storefront.ordering.queries import load_order
from storefront.utils.logging import logger


@storefront.command(part_of="Order")
class RecordOrderPayment:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)
    payment_id = Identifier()


@storefront.command_handler(part_of=Order)
class RecordOrderPaymentHandler:
    @handle(RecordOrderPayment)
    def record_order_payment(self, command):
        order = load_order(command.order_id)
        if order.payment_status == PaymentStatus.PAID.value:
            logger.info("Order already paid, payment update skipped", order_id=str(order.id))
            return order.payment_status

        if order.record_payment(command.payment_status, payment_id=command.payment_id):
            current_domain.repository_for(Order).add(order)
            logger.info("Order payment status recorded", order_id=str(order.id), payment_status=order.payment_status)
        return order.payment_status
