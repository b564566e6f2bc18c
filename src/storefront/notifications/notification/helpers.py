"""Shared helpers for notification event handlers.

Render a template, then create and store one Notification per channel.
"""

from protean.utils.globals import current_domain

from storefront.notifications.notification.notification import (
    STAFF_RECIPIENT,
    Notification,
    NotificationChannel,
)
from storefront.notifications.templates import get_template
from storefront.utils.logging import logger


def notify_user(
    user_id: str,
    template_name: str,
    context: dict,
    email: str | None = None,
    action_url: str | None = None,
    source_event_type: str | None = None,
) -> list[str]:
    """Create an in-app notification for a user, plus an email copy when an address is known.

    Returns:
        List of notification IDs created.
    """
    template_cls = get_template(template_name)
    rendered = template_cls.render(context)

    channels = [NotificationChannel.IN_APP.value]
    if email:
        channels.append(NotificationChannel.EMAIL.value)

    repo = current_domain.repository_for(Notification)
    notification_ids = []
    for channel in channels:
        notification = Notification.create(
            user_id=user_id,
            notification_type=template_cls.notification_type,
            title=rendered["title"],
            message=rendered["message"],
            channel=channel,
            priority=template_cls.priority,
            data=context,
            action_url=action_url,
            email=email if channel == NotificationChannel.EMAIL.value else None,
            source_event_type=source_event_type,
        )
        repo.add(notification)
        notification_ids.append(str(notification.id))

    logger.info(
        "Notifications created",
        user_id=str(user_id),
        template=template_name,
        channels=channels,
        count=len(notification_ids),
    )
    return notification_ids


def notify_staff(template_name: str, context: dict, source_event_type: str | None = None) -> str:
    """Create an in-app notification addressed to the back office.

    Returns:
        Notification ID.
    """
    template_cls = get_template(template_name)
    rendered = template_cls.render(context)

    notification = Notification.create(
        user_id=STAFF_RECIPIENT,
        notification_type=template_cls.notification_type,
        title=rendered["title"],
        message=rendered["message"],
        priority=template_cls.priority,
        data=context,
        source_event_type=source_event_type,
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Staff notification created",
        template=template_name,
        notification_id=str(notification.id),
    )
    return str(notification.id)
