"""Order placed template: sent when an order is created."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class OrderPlacedTemplate:
    notification_type = NotificationType.ORDER.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        total = context.get("total", "0")
        currency = context.get("currency", "VND")
        return {
            "title": f"Order {order_number} placed",
            "message": (
                f"We received your order {order_number}.\n\n"
                f"Order total: {total} {currency}\n\n"
                "We will let you know as soon as it is confirmed."
            ),
        }
