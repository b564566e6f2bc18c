"""Read-side helpers for notifications."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.notifications.notification.notification import (
    STAFF_RECIPIENT,
    Notification,
    NotificationStatus,
)
from storefront.shared.access import Actor
from storefront.shared.errors import NotFound, Unauthorized
from storefront.shared.pagination import Page, iter_all, paginate


@dataclass
class NotificationFilters:
    notification_type: str | None = None
    status: str | None = None
    channel: str | None = None


def recipients_for(actor: Actor) -> list[str]:
    """Staff also receive what is addressed to the back office."""
    if actor.is_staff:
        return [actor.user_id, STAFF_RECIPIENT]
    return [actor.user_id]


def load_notification(notification_id) -> Notification:
    try:
        return current_domain.repository_for(Notification).get(notification_id)
    except ObjectNotFoundError:
        raise NotFound(f"Notification {notification_id} not found", field="notification_id") from None


def get_notification(notification_id, actor: Actor) -> Notification:
    notification = load_notification(notification_id)
    if not notification.is_visible_to(actor):
        raise Unauthorized("You do not own this notification", field="user_id")
    return notification


def list_notifications(
    actor: Actor,
    filters: NotificationFilters,
    page: int | None = None,
    limit: int | None = None,
) -> Page:
    criteria = {"user_id__in": recipients_for(actor)}
    if filters.notification_type:
        criteria["notification_type"] = filters.notification_type
    if filters.status:
        criteria["status"] = filters.status
    if filters.channel:
        criteria["channel"] = filters.channel

    query = current_domain.repository_for(Notification)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def unread_for(recipients: list[str]) -> list[Notification]:
    query = current_domain.repository_for(Notification)._dao.query.filter(
        user_id__in=recipients,
        status=NotificationStatus.UNREAD.value,
    )
    return list(iter_all(query))


def unread_count(actor: Actor) -> int:
    return (
        current_domain.repository_for(Notification)
        ._dao.query.filter(user_id__in=recipients_for(actor), status=NotificationStatus.UNREAD.value)
        .all()
        .total
    )
