"""Order shipped template: carries the tracking number."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class OrderShippedTemplate:
    notification_type = NotificationType.SHIPPING.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        tracking_number = context.get("tracking_number", "N/A")
        return {
            "title": f"Order {order_number} shipped",
            "message": (f"Your order {order_number} is on its way.\n\nTracking number: {tracking_number}"),
        }
