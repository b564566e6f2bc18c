"""Tests for the Notification aggregate state machines."""

import pytest
from protean.exceptions import ValidationError

from storefront.notifications.notification.events import NotificationCreated, NotificationRead
from storefront.notifications.notification.notification import (
    STAFF_RECIPIENT,
    Notification,
    NotificationStatus,
)
from storefront.shared.access import Actor
from storefront.shared.errors import InvalidTransition


def _notification(**overrides):
    values = {
        "user_id": "user-1",
        "notification_type": "order",
        "title": "Order placed",
        "message": "We received your order.",
    }
    values.update(overrides)
    return Notification.create(**values)


class TestCreation:
    def test_in_app_is_delivered_immediately(self):
        notification = _notification(data={"order_number": "ORD-1"})
        assert notification.status == NotificationStatus.UNREAD.value
        assert notification.delivery_status == "sent"
        assert notification.sent_at is not None
        assert notification.payload == {"order_number": "ORD-1"}
        assert isinstance(notification._events[-1], NotificationCreated)

    def test_email_waits_for_dispatch(self):
        notification = _notification(channel="email", email="buyer@example.com")
        assert notification.delivery_status == "pending"
        assert notification.sent_at is None

    def test_email_requires_address(self):
        with pytest.raises(ValidationError):
            _notification(channel="email")


class TestReadState:
    def test_read_and_unread(self):
        notification = _notification()
        assert notification.mark_read()
        assert notification.read_at is not None
        assert isinstance(notification._events[-1], NotificationRead)
        assert notification.mark_read() is False

        assert notification.mark_unread()
        assert notification.read_at is None

    def test_archive_round_trip(self):
        notification = _notification()
        assert notification.archive()
        assert notification.read_at is not None

        with pytest.raises(InvalidTransition):
            notification.mark_unread()

        assert notification.unarchive()
        assert notification.status == NotificationStatus.READ.value
        assert notification.unarchive() is False


class TestDelivery:
    def test_sent_once(self):
        notification = _notification(channel="email", email="buyer@example.com")
        notification.mark_sent("msg-1")
        with pytest.raises(InvalidTransition):
            notification.mark_failed("late failure")

    def test_failure_reason_truncated(self):
        notification = _notification(channel="email", email="buyer@example.com")
        notification.mark_failed("x" * 600)
        assert len(notification.failure_reason) == 500


class TestVisibility:
    def test_owner_only(self):
        notification = _notification()
        assert notification.is_visible_to(Actor.of("user-1"))
        assert not notification.is_visible_to(Actor.of("user-2"))

    def test_staff_see_back_office_notifications(self):
        notification = _notification(user_id=STAFF_RECIPIENT, notification_type="inventory")
        assert notification.is_visible_to(Actor.of("staff-1", "staff"))
        assert not notification.is_visible_to(Actor.of("user-1"))
