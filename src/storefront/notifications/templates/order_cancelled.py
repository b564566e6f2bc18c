"""Order cancelled template."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER.value
    priority = NotificationPriority.HIGH.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason") or "No reason given"
        return {
            "title": f"Order {order_number} cancelled",
            "message": f"Your order {order_number} has been cancelled.\n\nReason: {reason}",
        }
