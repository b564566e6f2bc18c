"""Payment link creation: command and handler.

Asks the gateway serving the order's payment method for a payment request.
VietQR goes to PayOS and comes back with a checkout URL and QR payload; cash
on delivery needs no external call and gets a reference valid for a week.
"""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront import config
from storefront.domain import storefront
from storefront.ordering.order.order import OrderStatus, PaymentStatus as OrderPaymentStatus, parse_payment_method
from storefront.ordering.queries import load_order
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import LinkItem
from storefront.payments.payment.payment import Payment, generate_order_code, link_validity
from storefront.payments.queries import find_by_order_code, pending_payment_for
from storefront.shared.access import Actor
from storefront.shared.errors import BusinessRuleViolation
from storefront.utils.logging import logger

_ORDER_CODE_ATTEMPTS = 5


@storefront.command(part_of="Payment")
class CreatePaymentLink:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    payment_method = String(max_length=20)


def _unique_order_code() -> int:
    for _ in range(_ORDER_CODE_ATTEMPTS):
        candidate = generate_order_code()
        if find_by_order_code(candidate) is None:
            return candidate
    raise BusinessRuleViolation("Could not allocate a payment code, retry the request", field="order_code")


@storefront.command_handler(part_of=Payment)
class CreatePaymentLinkHandler:
    @handle(CreatePaymentLink)
    def create_payment_link(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        order = load_order(command.order_id)
        actor.require_owner(order.user_id, "order")

        if order.payment_status == OrderPaymentStatus.PAID.value:
            raise BusinessRuleViolation(f"Order {order.order_number} is already paid", field="order_id")
        if order.status == OrderStatus.CANCELLED.value:
            raise BusinessRuleViolation(f"Order {order.order_number} is cancelled", field="order_id")

        method = parse_payment_method(command.payment_method or order.payment_method).value
        existing = pending_payment_for(order.id, method)
        if existing is not None:
            logger.info("Reusing pending payment link", order_id=str(order.id), payment_id=str(existing.id))
            return str(existing.id)

        gateway = get_gateway(method)
        order_code = _unique_order_code()
        link = gateway.create_payment_link(
            order_code=order_code,
            amount=order.total,
            description=order.order_number,
            items=[
                LinkItem(
                    name=item.name or item.sku or "Item",
                    quantity=item.quantity,
                    price=int(round(item.unit_price)),
                )
                for item in order.items
            ],
            expires_at=datetime.now(UTC) + link_validity(method),
        )

        payment = Payment.create(
            order_id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            method=method,
            gateway_name=gateway.name,
            amount=order.total,
            currency=order.amounts.currency if order.amounts else config.CURRENCY,
            link=link,
        )
        current_domain.repository_for(Payment).add(payment)
        logger.info(
            "Payment link created",
            payment_id=str(payment.id),
            order_id=str(order.id),
            order_code=link.order_code,
            method=method,
            gateway=gateway.name,
        )
        return str(payment.id)
