"""Email dispatch: sends email-channel notifications through the email adapter.

Reacts to NotificationCreated and records the outcome on the notification as
SENT or FAILED. In-app notifications need no dispatch.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notifications.channel import get_email_channel
from storefront.notifications.notification.events import NotificationCreated
from storefront.notifications.notification.notification import (
    DeliveryStatus,
    Notification,
    NotificationChannel,
)
from storefront.utils.logging import logger


@storefront.event_handler(part_of=Notification)
class NotificationDispatcher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        if event.channel != NotificationChannel.EMAIL.value:
            return

        repo = current_domain.repository_for(Notification)
        try:
            notification = repo.get(event.notification_id)
        except ObjectNotFoundError:
            logger.error("Failed to load notification for dispatch", notification_id=str(event.notification_id))
            return

        if DeliveryStatus(notification.delivery_status) != DeliveryStatus.PENDING:
            logger.info(
                "Notification already dispatched, skipping",
                notification_id=str(notification.id),
                delivery_status=notification.delivery_status,
            )
            return

        try:
            result = get_email_channel().send(
                to=notification.email,
                subject=notification.title,
                body=notification.message,
            )
            if result.get("status") == "sent":
                notification.mark_sent(result.get("message_id"))
            else:
                notification.mark_failed(result.get("error", "Unknown dispatch error"))
        except Exception as exc:
            notification.mark_failed(str(exc))
            logger.error("Notification dispatch failed", notification_id=str(notification.id), exc_info=True)

        repo.add(notification)
