"""Payment webhook processing: command and handler.

The HTTP layer verifies the gateway's signature over the raw body and
decodes it before this command is built; the handler only records outcomes.
"""

from protean import handle
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.payments.payment.payment import Payment, PaymentStatus
from storefront.payments.queries import find_by_order_code, load_payment
from storefront.utils.logging import logger


@storefront.command(part_of="Payment")
class ProcessPaymentWebhook:
    """Record a payment outcome reported by a verified gateway callback."""

    order_code = Integer(required=True)
    status = String(required=True, max_length=20)  # paid, pending, failed, cancelled
    amount = Float()
    transaction_id = String(max_length=255)
    reference = String(max_length=255)
    description = String(max_length=500)


@storefront.command_handler(part_of=Payment)
class ProcessWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        record = find_by_order_code(command.order_code)
        if record is None:
            # PayOS sends a test request with a made-up order code when the webhook URL is registered.
            logger.warning("Webhook for unknown order code ignored", order_code=command.order_code)
            return "ignored"

        payment = load_payment(record.payment_id)
        if payment.status in (PaymentStatus.PAID.value, PaymentStatus.CANCELLED.value):
            logger.info("Webhook for settled payment ignored", payment_id=str(payment.id), status=payment.status)
            return payment.status

        status = command.status
        reason = command.description
        if status == PaymentStatus.PAID.value and command.amount is not None and command.amount < payment.amount:
            logger.warning(
                "Webhook amount below payment amount",
                payment_id=str(payment.id),
                expected=payment.amount,
                received=command.amount,
            )
            status = PaymentStatus.FAILED.value
            reason = f"Received {command.amount} of {payment.amount}"

        changed = payment.apply_outcome(
            status,
            transaction_id=command.transaction_id,
            reference=command.reference,
            reason=reason,
        )
        if changed:
            current_domain.repository_for(Payment).add(payment)
            logger.info("Webhook processed", payment_id=str(payment.id), status=payment.status)
        else:
            logger.info("Webhook had nothing to change", payment_id=str(payment.id), status=payment.status)
        return payment.status
