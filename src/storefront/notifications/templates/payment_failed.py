"""Payment failed template."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class PaymentFailedTemplate:
    notification_type = NotificationType.PAYMENT.value
    priority = NotificationPriority.HIGH.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason") or "The payment was not completed"
        return {
            "title": f"Payment failed for {order_number}",
            "message": (
                f"The payment for order {order_number} did not go through.\n\n"
                f"Reason: {reason}\n\n"
                "You can request a new payment link from the order page."
            ),
        }
