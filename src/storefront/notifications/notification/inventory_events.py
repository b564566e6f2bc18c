"""Notifications react to Inventory events: low stock alerts go to staff."""

from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.inventory.stock.events import LowStockDetected
from storefront.notifications.notification.helpers import notify_staff
from storefront.notifications.notification.notification import Notification
from storefront.notifications.templates import LOW_STOCK_ALERT
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Notification, stream_category="storefront::stock_item")
class InventoryNotificationsHandler:
    @handle(LowStockDetected)
    def on_low_stock_detected(self, event: LowStockDetected) -> None:
        try:
            notify_staff(
                template_name=LOW_STOCK_ALERT,
                context={
                    "stock_item_id": str(event.stock_item_id),
                    "product_id": str(event.product_id),
                    "variant_id": str(event.variant_id) if event.variant_id else None,
                    "sku": event.sku,
                    "available": event.available,
                    "reorder_point": event.reorder_point,
                },
                source_event_type="LowStockDetected",
            )
        except Exception:
            logger.error("Failed to create low stock alert", stock_item_id=str(event.stock_item_id), exc_info=True)
