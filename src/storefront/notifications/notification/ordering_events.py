"""Notifications react to Order events.

Each handler logs and swallows its own failures so that a broken notification
never affects the order flow that raised the event.
"""

from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.notification.helpers import notify_user
from storefront.notifications.notification.notification import Notification
from storefront.notifications.templates import (
    ORDER_CANCELLED,
    ORDER_CONFIRMED,
    ORDER_DELIVERED,
    ORDER_PLACED,
    ORDER_SHIPPED,
)
from storefront.ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderShipped,
)
from storefront.utils.logging import logger


def _order_url(order_id) -> str:
    return f"/orders/{order_id}"


@storefront.event_handler(part_of=Notification, stream_category="storefront::order")
class OrderNotificationsHandler:
    """Tells customers about each step of their order."""

    def _notify(self, event, template_name: str, context: dict) -> None:
        try:
            notify_user(
                user_id=str(event.user_id),
                template_name=template_name,
                context={"order_id": str(event.order_id), "order_number": event.order_number, **context},
                action_url=_order_url(event.order_id),
                source_event_type=event.__class__.__name__,
            )
        except Exception:
            logger.error(
                "Failed to create order notification",
                order_id=str(event.order_id),
                template=template_name,
                exc_info=True,
            )

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        self._notify(event, ORDER_PLACED, {"total": event.total, "currency": event.currency})

    @handle(OrderConfirmed)
    def on_order_confirmed(self, event: OrderConfirmed) -> None:
        self._notify(event, ORDER_CONFIRMED, {})

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        self._notify(event, ORDER_SHIPPED, {"tracking_number": event.tracking_number})

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        self._notify(event, ORDER_DELIVERED, {"total": event.total})

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._notify(event, ORDER_CANCELLED, {"reason": event.reason})
