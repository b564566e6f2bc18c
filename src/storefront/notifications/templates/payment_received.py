"""Payment received template."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class PaymentReceivedTemplate:
    notification_type = NotificationType.PAYMENT.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        amount = context.get("amount", "0")
        currency = context.get("currency", "VND")
        return {
            "title": f"Payment received for {order_number}",
            "message": f"We received your payment of {amount} {currency} for order {order_number}. Thank you!",
        }
