"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Notification")
class NotificationCreated:
    """A notification was created for a recipient."""

    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    notification_type = String(required=True)
    channel = String(required=True)
    priority = String(required=True)
    title = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationRead:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    read_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationMarkedUnread:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    marked_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationArchived:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    archived_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationUnarchived:
    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    unarchived_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationSent:
    """An email-channel notification was accepted by the mail adapter."""

    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    channel = String(required=True)
    message_id = String()
    sent_at = DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationFailed:
    """An email-channel notification could not be delivered."""

    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    channel = String(required=True)
    reason = String(required=True, max_length=500)
    failed_at = DateTime(required=True)
