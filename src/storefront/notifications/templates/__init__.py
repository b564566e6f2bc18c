"""Template registry: maps template names to template classes.

Each template knows its notification type, its default priority and how to
render a title and message from event context data.
"""

from storefront.notifications.templates.low_stock_alert import LowStockAlertTemplate
from storefront.notifications.templates.order_cancelled import OrderCancelledTemplate
from storefront.notifications.templates.order_confirmed import OrderConfirmedTemplate
from storefront.notifications.templates.order_delivered import OrderDeliveredTemplate
from storefront.notifications.templates.order_placed import OrderPlacedTemplate
from storefront.notifications.templates.order_shipped import OrderShippedTemplate
from storefront.notifications.templates.payment_failed import PaymentFailedTemplate
from storefront.notifications.templates.payment_received import PaymentReceivedTemplate
from storefront.notifications.templates.tracking_update import TrackingUpdateTemplate

ORDER_PLACED = "order_placed"
ORDER_CONFIRMED = "order_confirmed"
ORDER_SHIPPED = "order_shipped"
ORDER_DELIVERED = "order_delivered"
ORDER_CANCELLED = "order_cancelled"
PAYMENT_RECEIVED = "payment_received"
PAYMENT_FAILED = "payment_failed"
LOW_STOCK_ALERT = "low_stock_alert"
TRACKING_UPDATE = "tracking_update"

TEMPLATE_REGISTRY: dict[str, type] = {
    ORDER_PLACED: OrderPlacedTemplate,
    ORDER_CONFIRMED: OrderConfirmedTemplate,
    ORDER_SHIPPED: OrderShippedTemplate,
    ORDER_DELIVERED: OrderDeliveredTemplate,
    ORDER_CANCELLED: OrderCancelledTemplate,
    PAYMENT_RECEIVED: PaymentReceivedTemplate,
    PAYMENT_FAILED: PaymentFailedTemplate,
    LOW_STOCK_ALERT: LowStockAlertTemplate,
    TRACKING_UPDATE: TrackingUpdateTemplate,
}


def get_template(name: str):
    """Look up a template class by name."""
    template_cls = TEMPLATE_REGISTRY.get(name)
    if template_cls is None:
        raise ValueError(f"No template registered for: {name}")
    return template_cls
