"""Payment status sync and cancellation: commands and handler.

Both are keyed by the gateway order code and are idempotent: the payment's
current status decides whether there is anything left to do.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.payments.gateway import get_gateway
from storefront.payments.payment.payment import Payment, PaymentStatus
from storefront.payments.queries import load_by_order_code
from storefront.shared.access import Actor
from storefront.shared.errors import InvalidTransition
from storefront.utils.logging import logger


@storefront.command(part_of="Payment")
class ProcessPayment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_code = Integer(required=True)


@storefront.command(part_of="Payment")
class CancelPayment:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_code = Integer(required=True)
    reason = String(max_length=500, default="Cancelled by customer")


@storefront.command_handler(part_of=Payment)
class PaymentProcessingHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        payment = load_by_order_code(command.order_code)
        actor.require_owner(payment.user_id, "payment")

        if payment.status in (PaymentStatus.PAID.value, PaymentStatus.CANCELLED.value):
            return payment.status

        info = get_gateway(payment.method).get_payment_info(payment.order_code)
        changed = payment.apply_outcome(
            info.status,
            transaction_id=info.transaction_id,
            reference=info.reference,
            reason=info.description,
        )
        if changed:
            current_domain.repository_for(Payment).add(payment)
            logger.info("Payment status synced", payment_id=str(payment.id), status=payment.status)
        return payment.status

    @handle(CancelPayment)
    def cancel_payment(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        payment = load_by_order_code(command.order_code)
        actor.require_owner(payment.user_id, "payment")

        if payment.status == PaymentStatus.CANCELLED.value:
            return payment.status
        if payment.status == PaymentStatus.PAID.value:
            raise InvalidTransition(f"Payment {payment.order_code} is already paid and cannot be cancelled")

        get_gateway(payment.method).cancel_payment(payment.order_code, command.reason)
        payment.cancel(command.reason)
        current_domain.repository_for(Payment).add(payment)
        logger.info("Payment cancelled", payment_id=str(payment.id), order_code=payment.order_code)
        return payment.status
