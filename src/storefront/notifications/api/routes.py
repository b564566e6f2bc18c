"""FastAPI routes for the caller's notifications."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_actor, staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.notifications import queries
from storefront.notifications.api.schemas import SendNotificationRequest
from storefront.notifications.notification.management import (
    ArchiveNotification,
    DeleteNotification,
    MarkAllNotificationsRead,
    MarkNotificationRead,
    MarkNotificationUnread,
    SendNotification,
    UnarchiveNotification,
)
from storefront.shared.access import Actor

notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


@notification_router.get("", response_model=PagedEnvelope)
async def list_my_notifications(
    type: str | None = None,
    status: str | None = None,
    channel: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    filters = queries.NotificationFilters(notification_type=type, status=status, channel=channel)
    return paged(queries.list_notifications(actor, filters, page, limit))


@notification_router.get("/unread-count", response_model=Envelope)
async def unread_count(actor: Actor = Depends(current_actor)) -> Envelope:
    return ok({"count": queries.unread_count(actor)})


@notification_router.post("", status_code=201, response_model=Envelope)
async def send_notification(body: SendNotificationRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    values = body.model_dump()
    values["data"] = json.dumps(values["data"]) if values["data"] is not None else None
    notification_id = current_domain.process(SendNotification(**_by(actor), **values), asynchronous=False)
    return ok(queries.load_notification(notification_id), "Notification sent")


@notification_router.post("/read-all", response_model=Envelope)
async def mark_all_read(actor: Actor = Depends(current_actor)) -> Envelope:
    count = current_domain.process(MarkAllNotificationsRead(**_by(actor)), asynchronous=False)
    return ok({"count": count}, "All notifications marked as read")


@notification_router.get("/{notification_id}", response_model=Envelope)
async def get_notification(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.get_notification(notification_id, actor))


@notification_router.post("/{notification_id}/read", response_model=Envelope)
async def mark_read(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(MarkNotificationRead(**_by(actor), notification_id=notification_id), asynchronous=False)
    return ok(queries.get_notification(notification_id, actor), "Notification marked as read")


@notification_router.post("/{notification_id}/unread", response_model=Envelope)
async def mark_unread(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(MarkNotificationUnread(**_by(actor), notification_id=notification_id), asynchronous=False)
    return ok(queries.get_notification(notification_id, actor), "Notification marked as unread")


@notification_router.post("/{notification_id}/archive", response_model=Envelope)
async def archive(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(ArchiveNotification(**_by(actor), notification_id=notification_id), asynchronous=False)
    return ok(queries.get_notification(notification_id, actor), "Notification archived")


@notification_router.post("/{notification_id}/unarchive", response_model=Envelope)
async def unarchive(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(UnarchiveNotification(**_by(actor), notification_id=notification_id), asynchronous=False)
    return ok(queries.get_notification(notification_id, actor), "Notification unarchived")


@notification_router.delete("/{notification_id}", response_model=Envelope)
async def delete(notification_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(DeleteNotification(**_by(actor), notification_id=notification_id), asynchronous=False)
    return ok(message="Notification deleted")
