"""Notification state changes: commands and handler.

Only the recipient may change a notification. Staff act on notifications
addressed to the back office recipient.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notifications.notification.notification import (
    Notification,
    NotificationChannel,
    NotificationPriority,
)
from storefront.notifications.queries import load_notification, recipients_for, unread_for
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Unauthorized
from storefront.utils.logging import logger


@storefront.command(part_of="Notification")
class SendNotification:
    """Staff-authored notification to a single user."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    notification_type = String(required=True, max_length=50)
    title = String(required=True, max_length=255)
    message = Text(required=True)
    channel = String(max_length=20, default=NotificationChannel.IN_APP.value)
    priority = String(max_length=20, default=NotificationPriority.NORMAL.value)
    email = String(max_length=255)
    action_url = String(max_length=500)
    data = Text()  # JSON object


@storefront.command(part_of="Notification")
class MarkNotificationRead:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    notification_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class MarkNotificationUnread:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    notification_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class MarkAllNotificationsRead:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)


@storefront.command(part_of="Notification")
class ArchiveNotification:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    notification_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class UnarchiveNotification:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    notification_id = Identifier(required=True)


@storefront.command(part_of="Notification")
class DeleteNotification:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    notification_id = Identifier(required=True)


def _owned(command) -> Notification:
    actor = Actor.of(command.actor_id, command.actor_role)
    notification = load_notification(command.notification_id)
    if not notification.is_visible_to(actor):
        raise Unauthorized("You do not own this notification", field="user_id")
    return notification


@storefront.command_handler(part_of=Notification)
class NotificationHandler:
    @handle(SendNotification)
    def send_notification(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        notification = Notification.create(
            user_id=command.user_id,
            notification_type=command.notification_type,
            title=command.title,
            message=command.message,
            channel=command.channel,
            priority=command.priority,
            data=command.data,
            action_url=command.action_url,
            email=command.email,
            source_event_type="SendNotification",
        )
        current_domain.repository_for(Notification).add(notification)
        logger.info(
            "Notification sent by staff",
            notification_id=str(notification.id),
            user_id=str(command.user_id),
            channel=command.channel,
        )
        return str(notification.id)

    @handle(MarkNotificationRead)
    def mark_read(self, command):
        notification = _owned(command)
        if notification.mark_read():
            current_domain.repository_for(Notification).add(notification)

    @handle(MarkNotificationUnread)
    def mark_unread(self, command):
        notification = _owned(command)
        if notification.mark_unread():
            current_domain.repository_for(Notification).add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        repo = current_domain.repository_for(Notification)
        count = 0
        for notification in unread_for(recipients_for(actor)):
            notification.mark_read()
            repo.add(notification)
            count += 1
        logger.info("Notifications marked read", user_id=actor.user_id, count=count)
        return count

    @handle(ArchiveNotification)
    def archive(self, command):
        notification = _owned(command)
        if notification.archive():
            current_domain.repository_for(Notification).add(notification)

    @handle(UnarchiveNotification)
    def unarchive(self, command):
        notification = _owned(command)
        if notification.unarchive():
            current_domain.repository_for(Notification).add(notification)

    @handle(DeleteNotification)
    def delete(self, command):
        notification = _owned(command)
        current_domain.repository_for(Notification)._dao.delete(notification)
        logger.info("Notification deleted", notification_id=str(notification.id))
