"""Order confirmed template."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class OrderConfirmedTemplate:
    notification_type = NotificationType.ORDER.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "title": f"Order {order_number} confirmed",
            "message": f"Your order {order_number} has been confirmed and is being prepared for shipping.",
        }
