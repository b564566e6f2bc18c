"""Order delivered template."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class OrderDeliveredTemplate:
    notification_type = NotificationType.SHIPPING.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "title": f"Order {order_number} delivered",
            "message": (
                f"Your order {order_number} has been delivered.\n\n"
                "Loyalty points for this order have been added to your balance."
            ),
        }
