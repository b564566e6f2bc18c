"""Tracking update template: a carrier reported a new parcel status."""

from storefront.notifications.notification.notification import NotificationPriority, NotificationType


class TrackingUpdateTemplate:
    notification_type = NotificationType.SHIPPING.value
    priority = NotificationPriority.NORMAL.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status_text = context.get("status_text") or context.get("status", "updated")
        message = f"Order {order_number}: {status_text}"
        if context.get("location"):
            message += f"\nLocation: {context['location']}"
        message += f"\n\nTracking number: {context.get('tracking_number', 'N/A')}"
        return {"title": f"Order Update: {status_text}", "message": message}
