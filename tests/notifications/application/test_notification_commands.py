"""Application tests for notification commands and dispatch."""

import pytest
from protean.utils.globals import current_domain

from storefront.notifications.channel import get_email_channel
from storefront.notifications.notification.management import (
    ArchiveNotification,
    DeleteNotification,
    MarkAllNotificationsRead,
    MarkNotificationRead,
    MarkNotificationUnread,
    SendNotification,
)
from storefront.notifications.queries import (
    NotificationFilters,
    get_notification,
    list_notifications,
    load_notification,
    unread_count,
)
from storefront.shared.access import Actor
from storefront.shared.errors import Forbidden, NotFound, Unauthorized

OWNER = {"actor_id": "user-1"}
STRANGER = {"actor_id": "user-2"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _send(staff, **overrides):
    values = {
        "user_id": "user-1",
        "notification_type": "promotion",
        "title": "Weekend sale",
        "message": "Everything is 10% off this weekend.",
    }
    values.update(overrides)
    return _process(SendNotification(**values, **staff))


class TestSendNotification:
    def test_staff_sends_in_app(self, staff):
        notification = load_notification(_send(staff))
        assert notification.user_id == "user-1"
        assert notification.delivery_status == "sent"
        assert notification.source_event_type == "SendNotification"

    def test_customers_cannot_send(self):
        with pytest.raises(Forbidden):
            _send(OWNER)

    def test_email_is_dispatched(self, staff):
        notification_id = _send(staff, channel="email", email="buyer@example.com")

        notification = load_notification(notification_id)
        assert notification.delivery_status == "sent"
        sent = get_email_channel().sent_emails
        assert len(sent) == 1
        assert sent[0]["to"] == "buyer@example.com"
        assert sent[0]["subject"] == "Weekend sale"

    def test_email_failure_is_recorded(self, staff):
        get_email_channel().configure(should_succeed=False, failure_reason="Mailbox full")
        notification = load_notification(_send(staff, channel="email", email="buyer@example.com"))
        assert notification.delivery_status == "failed"
        assert notification.failure_reason == "Mailbox full"

    def test_long_failure_reason_is_kept_up_to_limit(self, staff):
        reason = "SMTP 552: " + "message rejected " * 25
        get_email_channel().configure(should_succeed=False, failure_reason=reason)
        notification = load_notification(_send(staff, channel="email", email="buyer@example.com"))

        assert len(reason) > 255
        assert notification.delivery_status == "failed"
        assert notification.failure_reason == reason[:500]

    def test_bounced_recipient_fails_only_that_email(self, staff):
        get_email_channel().bounce("gone@example.com")
        bounced = load_notification(_send(staff, channel="email", email="gone@example.com"))
        delivered = load_notification(_send(staff, channel="email", email="buyer@example.com"))

        assert bounced.delivery_status == "failed"
        assert delivered.delivery_status == "sent"
        assert len(get_email_channel().emails_to("BUYER@example.com")) == 1


class TestReadState:
    def test_owner_marks_read_and_unread(self, staff):
        notification_id = _send(staff)
        _process(MarkNotificationRead(notification_id=notification_id, **OWNER))
        assert load_notification(notification_id).status == "read"

        _process(MarkNotificationUnread(notification_id=notification_id, **OWNER))
        assert load_notification(notification_id).status == "unread"

    def test_stranger_is_rejected(self, staff):
        notification_id = _send(staff)
        with pytest.raises(Unauthorized):
            _process(MarkNotificationRead(notification_id=notification_id, **STRANGER))
        with pytest.raises(Unauthorized):
            get_notification(notification_id, Actor.of("user-2"))

    def test_mark_all_read(self, staff):
        for _ in range(3):
            _send(staff)
        _send(staff, user_id="user-2")

        assert _process(MarkAllNotificationsRead(**OWNER)) == 3
        assert unread_count(Actor.of("user-1")) == 0
        assert unread_count(Actor.of("user-2")) == 1

    def test_archive_and_delete(self, staff):
        notification_id = _send(staff)
        _process(ArchiveNotification(notification_id=notification_id, **OWNER))
        assert load_notification(notification_id).status == "archived"

        _process(DeleteNotification(notification_id=notification_id, **OWNER))
        with pytest.raises(NotFound):
            load_notification(notification_id)

    def test_listing_filters(self, staff):
        _send(staff)
        _send(staff, notification_type="system")
        actor = Actor.of("user-1")

        assert list_notifications(actor, NotificationFilters()).total == 2
        assert list_notifications(actor, NotificationFilters(notification_type="system")).total == 1
