"""Notifications react to Payment outcomes."""

from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.notification.helpers import notify_user
from storefront.notifications.notification.notification import Notification
from storefront.notifications.templates import PAYMENT_FAILED, PAYMENT_RECEIVED
from storefront.payments.payment.events import PaymentFailed, PaymentSucceeded
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Notification, stream_category="storefront::payment")
class PaymentNotificationsHandler:
    @handle(PaymentSucceeded)
    def on_payment_succeeded(self, event: PaymentSucceeded) -> None:
        try:
            notify_user(
                user_id=str(event.user_id),
                template_name=PAYMENT_RECEIVED,
                context={
                    "order_id": str(event.order_id),
                    "order_number": event.order_number,
                    "amount": event.amount,
                    "method": event.method,
                },
                action_url=f"/orders/{event.order_id}",
                source_event_type="PaymentSucceeded",
            )
        except Exception:
            logger.error("Failed to create payment notification", payment_id=str(event.payment_id), exc_info=True)

    @handle(PaymentFailed)
    def on_payment_failed(self, event: PaymentFailed) -> None:
        try:
            notify_user(
                user_id=str(event.user_id),
                template_name=PAYMENT_FAILED,
                context={
                    "order_id": str(event.order_id),
                    "order_number": event.order_number,
                    "reason": event.reason,
                    "method": event.method,
                },
                action_url=f"/orders/{event.order_id}",
                source_event_type="PaymentFailed",
            )
        except Exception:
            logger.error("Failed to create payment notification", payment_id=str(event.payment_id), exc_info=True)
