"""Notification aggregate (CQRS): a per-user message.

Content is fixed at creation. Afterwards only the read state and, for email
notifications, the delivery outcome change.

Read State Machine:
    UNREAD ⇄ READ
    UNREAD | READ → ARCHIVED → READ (unarchive)

Delivery (email channel only):
    PENDING → SENT | FAILED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront
from storefront.notifications.notification.events import (
    NotificationArchived,
    NotificationCreated,
    NotificationFailed,
    NotificationMarkedUnread,
    NotificationRead,
    NotificationSent,
    NotificationUnarchived,
)
from storefront.shared.errors import InvalidTransition

# Notifications addressed to the back office rather than a single user.
STAFF_RECIPIENT = "admin"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER = "order"
    PAYMENT = "payment"
    SHIPPING = "shipping"
    INVENTORY = "inventory"
    PROMOTION = "promotion"
    POINT = "point"
    SYSTEM = "system"
    GENERAL = "general"


class NotificationChannel(Enum):
    IN_APP = "in_app"
    EMAIL = "email"


class NotificationPriority(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NotificationStatus(Enum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


class DeliveryStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Notification:
    # Recipient: a user id, or STAFF_RECIPIENT
    user_id: Identifier(required=True)
    email: String(max_length=255)

    notification_type: String(choices=NotificationType, required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.IN_APP.value)
    priority: String(choices=NotificationPriority, default=NotificationPriority.NORMAL.value)

    # Content
    title: String(required=True, max_length=255)
    message: Text(required=True)
    data: Text()  # JSON
    action_url: String(max_length=500)
    source_event_type: String(max_length=200)

    status: String(choices=NotificationStatus, default=NotificationStatus.UNREAD.value)
    read_at: DateTime()
    archived_at: DateTime()

    # Delivery tracking
    delivery_status: String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)
    sent_at: DateTime()
    failure_reason: String(max_length=500)

    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        notification_type,
        title,
        message,
        channel=NotificationChannel.IN_APP.value,
        priority=NotificationPriority.NORMAL.value,
        data=None,
        action_url=None,
        email=None,
        source_event_type=None,
    ):
        if channel == NotificationChannel.EMAIL.value and not email:
            raise ValidationError({"email": ["An email address is required for email notifications"]})

        now = datetime.now(UTC)
        in_app = channel == NotificationChannel.IN_APP.value
        notification = cls(
            user_id=str(user_id),
            email=email,
            notification_type=notification_type,
            channel=channel,
            priority=priority,
            title=title,
            message=message,
            data=json.dumps(data, default=str) if isinstance(data, dict) else data,
            action_url=action_url,
            source_event_type=source_event_type,
            status=NotificationStatus.UNREAD.value,
            delivery_status=DeliveryStatus.SENT.value if in_app else DeliveryStatus.PENDING.value,
            sent_at=now if in_app else None,
            created_at=now,
            updated_at=now,
        )
        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                notification_type=notification_type,
                channel=channel,
                priority=priority,
                title=title,
                created_at=now,
            )
        )
        return notification

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def payload(self) -> dict:
        return json.loads(self.data) if self.data else {}

    def is_visible_to(self, actor) -> bool:
        if str(self.user_id) == actor.user_id:
            return True
        return str(self.user_id) == STAFF_RECIPIENT and actor.is_staff

    # -------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------
    def mark_read(self) -> bool:
        current = NotificationStatus(self.status)
        if current == NotificationStatus.READ:
            return False
        if current == NotificationStatus.ARCHIVED:
            raise InvalidTransition("Archived notifications must be unarchived first")

        now = datetime.now(UTC)
        self.status = NotificationStatus.READ.value
        self.read_at = now
        self.updated_at = now
        self.raise_(NotificationRead(notification_id=str(self.id), user_id=str(self.user_id), read_at=now))
        return True

    def mark_unread(self) -> bool:
        current = NotificationStatus(self.status)
        if current == NotificationStatus.UNREAD:
            return False
        if current == NotificationStatus.ARCHIVED:
            raise InvalidTransition("Archived notifications must be unarchived first")

        now = datetime.now(UTC)
        self.status = NotificationStatus.UNREAD.value
        self.read_at = None
        self.updated_at = now
        self.raise_(NotificationMarkedUnread(notification_id=str(self.id), user_id=str(self.user_id), marked_at=now))
        return True

    def archive(self) -> bool:
        if NotificationStatus(self.status) == NotificationStatus.ARCHIVED:
            return False

        now = datetime.now(UTC)
        self.status = NotificationStatus.ARCHIVED.value
        self.archived_at = now
        self.read_at = self.read_at or now
        self.updated_at = now
        self.raise_(NotificationArchived(notification_id=str(self.id), user_id=str(self.user_id), archived_at=now))
        return True

    def unarchive(self) -> bool:
        if NotificationStatus(self.status) != NotificationStatus.ARCHIVED:
            return False

        now = datetime.now(UTC)
        self.status = NotificationStatus.READ.value
        self.archived_at = None
        self.updated_at = now
        self.raise_(
            NotificationUnarchived(notification_id=str(self.id), user_id=str(self.user_id), unarchived_at=now)
        )
        return True

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def _assert_pending_delivery(self):
        if DeliveryStatus(self.delivery_status) != DeliveryStatus.PENDING:
            raise InvalidTransition(f"Notification delivery is already {self.delivery_status}")

    def mark_sent(self, message_id=None):
        self._assert_pending_delivery()

        now = datetime.now(UTC)
        self.delivery_status = DeliveryStatus.SENT.value
        self.sent_at = now
        self.updated_at = now
        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                channel=self.channel,
                message_id=message_id,
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        self._assert_pending_delivery()

        now = datetime.now(UTC)
        self.delivery_status = DeliveryStatus.FAILED.value
        self.failure_reason = (reason or "Unknown delivery error")[:500]
        self.updated_at = now
        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                channel=self.channel,
                reason=self.failure_reason,
                failed_at=now,
            )
        )
