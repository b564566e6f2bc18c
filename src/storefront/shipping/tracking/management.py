"""Order tracking: commands and handler for staff-maintained tracking records."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.queries import load_order
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, NotFound
from storefront.shipping.provider.management import provider_by_code
from storefront.shipping.tracking.tracking import TRACKING_FIELDS, OrderTracking, TrackingSource
from storefront.utils.logging import logger


@storefront.command(part_of="OrderTracking")
class CreateOrderTracking:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    carrier = String(required=True, max_length=100)
    carrier_code = String(max_length=50)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()
    auto_sync = Boolean(default=True)
    notify_user = Boolean(default=True)


@storefront.command(part_of="OrderTracking")
class UpdateOrderTracking:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    tracking_id = Identifier(required=True)
    carrier = String(max_length=100)
    carrier_code = String(max_length=50)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()
    location = String(max_length=255)
    description = Text()
    auto_sync = Boolean()
    notify_user = Boolean()
    is_active = Boolean()


@storefront.command(part_of="OrderTracking")
class DeleteOrderTracking:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    tracking_id = Identifier(required=True)


@storefront.command(part_of="OrderTracking")
class AddTrackingEvent:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    tracking_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    status_text = String(max_length=255)
    location = String(max_length=255)
    description = Text()
    event_code = String(max_length=50)
    event_time = DateTime()
    is_important = Boolean()


def load_tracking(tracking_id) -> OrderTracking:
    try:
        return current_domain.repository_for(OrderTracking).get(tracking_id)
    except ObjectNotFoundError:
        raise NotFound(f"Tracking {tracking_id} not found", field="tracking_id") from None


def find_tracking(**criteria) -> OrderTracking | None:
    rows = current_domain.repository_for(OrderTracking)._dao.query.filter(**criteria).all().items
    return rows[0] if rows else None


@storefront.command_handler(part_of=OrderTracking)
class OrderTrackingHandler:
    @handle(CreateOrderTracking)
    def create_tracking(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        actor.require(Role.STAFF)
        order = load_order(command.order_id)
        if find_tracking(order_id=str(order.id)):
            raise Conflict(f"Order {order.order_number} already has tracking", field="order_id")
        tracking_number = command.tracking_number.strip()
        if find_tracking(tracking_number=tracking_number):
            raise Conflict(f"Tracking number {tracking_number} is already in use", field="tracking_number")
        if command.carrier_code:
            provider_by_code(command.carrier_code)

        tracking = OrderTracking.create(
            order,
            tracking_number,
            command.carrier,
            created_by=actor.user_id,
            carrier_code=command.carrier_code.strip().lower() if command.carrier_code else None,
            tracking_url=command.tracking_url,
            estimated_delivery=command.estimated_delivery,
            auto_sync=command.auto_sync,
            notify_user=command.notify_user,
        )
        current_domain.repository_for(OrderTracking).add(tracking)
        logger.info(
            "Order tracking created",
            tracking_id=str(tracking.id),
            order_id=str(order.id),
            tracking_number=tracking.tracking_number,
        )
        return str(tracking.id)

    @handle(UpdateOrderTracking)
    def update_tracking(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        tracking = load_tracking(command.tracking_id)
        if command.carrier_code:
            provider_by_code(command.carrier_code)
        changes = {key: getattr(command, key) for key in TRACKING_FIELDS}
        if changes["carrier_code"]:
            changes["carrier_code"] = changes["carrier_code"].strip().lower()
        tracking.update(**changes)
        current_domain.repository_for(OrderTracking).add(tracking)

    @handle(DeleteOrderTracking)
    def delete_tracking(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        tracking = load_tracking(command.tracking_id)
        current_domain.repository_for(OrderTracking)._dao.delete(tracking)
        logger.info("Order tracking deleted", tracking_id=str(tracking.id), order_id=str(tracking.order_id))

    @handle(AddTrackingEvent)
    def add_event(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        tracking = load_tracking(command.tracking_id)
        event = tracking.record_event(
            command.status,
            status_text=command.status_text,
            location=command.location,
            description=command.description,
            event_code=command.event_code,
            source=TrackingSource.MANUAL.value,
            event_time=command.event_time,
            is_important=command.is_important,
        )
        current_domain.repository_for(OrderTracking).add(tracking)
        logger.info("Tracking event added", tracking_id=str(tracking.id), status=tracking.status)
        return str(event.id)
