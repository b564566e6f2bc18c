"""Low stock alert template: addressed to staff."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class LowStockAlertTemplate:
    notification_type = NotificationType.INVENTORY.value
    priority = NotificationPriority.HIGH.value

    @staticmethod
    def render(context: dict) -> dict:
        sku = context.get("sku") or context.get("product_id", "N/A")
        available = context.get("available", 0)
        reorder_point = context.get("reorder_point", 0)
        return {
            "title": f"Low stock: {sku}",
            "message": (
                f"Stock for {sku} is down to {available} available units "
                f"(reorder point {reorder_point}). Consider restocking."
            ),
        }
