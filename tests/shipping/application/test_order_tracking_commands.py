"""Application tests for order tracking, carrier webhooks and tracking notifications."""

import json

import pytest
from protean.utils.globals import current_domain

from storefront.notifications.queries import NotificationFilters, list_notifications
from storefront.ordering.order.creation import CreateOrder
from storefront.shared.access import Actor
from storefront.shared.errors import Conflict, Forbidden, NotFound, Unauthorized
from storefront.shipping import queries
from storefront.shipping.provider.management import CreateShippingProvider
from storefront.shipping.tracking.management import (
    AddTrackingEvent,
    CreateOrderTracking,
    DeleteOrderTracking,
    UpdateOrderTracking,
    load_tracking,
)
from storefront.shipping.tracking.webhook import ProcessCarrierWebhook, sign_payload, webhook_provider

SECRET = "carrier-secret"


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def order_id(make_product):
    product_id = make_product(price=50000.0)
    return _process(
        CreateOrder(
            items=json.dumps([{"product_id": product_id, "quantity": 1}]),
            payment_method="vietqr",
            actor_id="user-1",
        )
    )


@pytest.fixture()
def carrier(admin):
    _process(
        CreateShippingProvider(name="GHN", code="ghn", supports_tracking=True, webhook_secret=SECRET, **admin)
    )
    return "ghn"


@pytest.fixture()
def tracking_id(order_id, carrier, staff):
    return _process(
        CreateOrderTracking(order_id=order_id, tracking_number="VN123", carrier="GHN", carrier_code=carrier, **staff)
    )


def _shipping_titles(user_id):
    page = list_notifications(Actor.of(user_id), NotificationFilters(notification_type="shipping"))
    return [n.title for n in page.items]


class TestCreateTracking:
    def test_create(self, tracking_id, order_id):
        tracking = load_tracking(tracking_id)
        assert tracking.order_id == order_id
        assert tracking.user_id == "user-1"
        assert tracking.carrier_code == "ghn"
        assert tracking.status == "pending"

    def test_staff_only(self, order_id):
        with pytest.raises(Forbidden):
            _process(CreateOrderTracking(order_id=order_id, tracking_number="VN1", carrier="GHN", actor_id="user-1"))

    def test_one_tracking_per_order(self, tracking_id, order_id, staff):
        with pytest.raises(Conflict):
            _process(CreateOrderTracking(order_id=order_id, tracking_number="VN999", carrier="GHN", **staff))

    def test_tracking_number_is_unique(self, tracking_id, make_product, staff):
        other = _process(
            CreateOrder(
                items=json.dumps([{"product_id": make_product(price=1000.0), "quantity": 1}]),
                payment_method="vietqr",
                actor_id="user-2",
            )
        )
        with pytest.raises(Conflict):
            _process(CreateOrderTracking(order_id=other, tracking_number="VN123", carrier="GHN", **staff))

    def test_unknown_carrier_code(self, order_id, staff):
        with pytest.raises(NotFound):
            _process(
                CreateOrderTracking(
                    order_id=order_id, tracking_number="VN1", carrier="X", carrier_code="nope", **staff
                )
            )

    def test_unknown_order(self, staff):
        with pytest.raises(NotFound):
            _process(CreateOrderTracking(order_id="missing", tracking_number="VN1", carrier="GHN", **staff))


class TestTrackingUpdates:
    def test_manual_event_notifies_the_customer(self, tracking_id, staff):
        _process(AddTrackingEvent(tracking_id=tracking_id, status="picked_up", location="Hanoi hub", **staff))

        tracking = load_tracking(tracking_id)
        assert tracking.status == "picked_up"
        assert tracking.timeline()[0].source == "manual"
        assert _shipping_titles("user-1") == ["Order Update: Picked up by carrier"]

    def test_muted_tracking_sends_nothing(self, tracking_id, staff):
        _process(UpdateOrderTracking(tracking_id=tracking_id, notify_user=False, **staff))
        _process(AddTrackingEvent(tracking_id=tracking_id, status="in_transit", **staff))
        assert _shipping_titles("user-1") == []

    def test_update_details(self, tracking_id, staff):
        _process(UpdateOrderTracking(tracking_id=tracking_id, tracking_url="https://ghn.vn/t/VN123", **staff))
        assert load_tracking(tracking_id).tracking_url == "https://ghn.vn/t/VN123"

    def test_delete(self, tracking_id, staff):
        _process(DeleteOrderTracking(tracking_id=tracking_id, **staff))
        with pytest.raises(NotFound):
            load_tracking(tracking_id)


class TestCarrierWebhook:
    def test_signature_is_checked(self, carrier):
        payload = b'{"tracking_number": "VN123", "status": "in_transit"}'
        assert webhook_provider(carrier, payload, sign_payload(SECRET, payload)).code == "ghn"
        with pytest.raises(Unauthorized):
            webhook_provider(carrier, payload, sign_payload("wrong", payload))
        with pytest.raises(Unauthorized):
            webhook_provider(carrier, payload, None)

    def test_carrier_without_secret(self, admin):
        _process(CreateShippingProvider(name="VNPost", code="vnpost", supports_tracking=True, **admin))
        with pytest.raises(Unauthorized):
            webhook_provider("vnpost", b"{}", "anything")

    def test_unknown_carrier(self):
        with pytest.raises(NotFound):
            webhook_provider("nope", b"{}", "anything")

    def test_records_carrier_status(self, tracking_id):
        status = _process(
            ProcessCarrierWebhook(
                carrier="GHN",
                carrier_code="ghn",
                tracking_number="VN123",
                status="delivered",
                event_time="2026-03-01T10:00:00Z",
                payload='{"status": "delivered"}',
            )
        )

        assert status == "delivered"
        tracking = load_tracking(tracking_id)
        assert tracking.actual_delivery is not None
        (received,) = [event for event in tracking.events if event.source == "webhook"]
        assert received.status == "delivered"
        assert received.source_data == '{"status": "delivered"}'

    def test_other_carriers_cannot_update(self, tracking_id):
        with pytest.raises(NotFound):
            _process(
                ProcessCarrierWebhook(carrier="GHTK", carrier_code="ghtk", tracking_number="VN123", status="delivered")
            )


class TestTrackingQueries:
    def test_owner_and_staff_can_read(self, tracking_id, order_id):
        assert queries.get_tracking(tracking_id, Actor.of("user-1")).tracking_number == "VN123"
        assert queries.tracking_for_order(order_id, Actor.of("staff-1", "staff")).id == tracking_id

    def test_other_customers_cannot(self, tracking_id):
        with pytest.raises(Unauthorized):
            queries.get_tracking(tracking_id, Actor.of("user-2"))

    def test_public_lookup_hides_order_and_customer(self, tracking_id):
        view = queries.public_tracking("VN123")
        assert view["status"] == "pending"
        assert "user_id" not in view
        assert "order_id" not in view
        assert len(view["events"]) == 1

    def test_public_lookup_of_inactive_tracking(self, tracking_id, staff):
        _process(UpdateOrderTracking(tracking_id=tracking_id, is_active=False, **staff))
        with pytest.raises(NotFound):
            queries.public_tracking("VN123")

    def test_stats(self, tracking_id, staff):
        _process(AddTrackingEvent(tracking_id=tracking_id, status="delivered", **staff))
        stats = queries.tracking_stats(Actor.of("staff-1", "staff"))
        assert stats.total == 1
        assert stats.by_status["delivered"] == 1
        assert stats.delivery_rate == 100.0
