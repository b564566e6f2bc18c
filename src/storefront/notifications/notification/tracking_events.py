"""Notifications react to parcel status changes reported on OrderTracking."""

from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.notification.helpers import notify_user
from storefront.notifications.notification.notification import Notification
from storefront.notifications.templates import TRACKING_UPDATE
from storefront.shipping.tracking.events import TrackingStatusUpdated
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Notification, stream_category="storefront::order_tracking")
class TrackingNotificationsHandler:
    @handle(TrackingStatusUpdated)
    def on_tracking_status_updated(self, event: TrackingStatusUpdated) -> None:
        if not event.notify_user:
            return
        try:
            notify_user(
                user_id=str(event.user_id),
                template_name=TRACKING_UPDATE,
                context={
                    "order_id": str(event.order_id),
                    "order_number": event.order_number,
                    "tracking_number": event.tracking_number,
                    "carrier": event.carrier,
                    "status": event.status,
                    "status_text": event.status_text,
                    "location": event.location,
                },
                action_url=f"/orders/{event.order_id}/tracking",
                source_event_type="TrackingStatusUpdated",
            )
        except Exception:
            logger.error("Failed to create tracking notification", tracking_id=str(event.tracking_id), exc_info=True)
