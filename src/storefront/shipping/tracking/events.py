"""Domain events for the OrderTracking aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="OrderTracking")
class TrackingCreated:
    __version__ = 1

    tracking_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String(required=True)
    created_by = Identifier()
    created_at = DateTime(required=True)


@storefront.event(part_of="OrderTracking")
class TrackingStatusUpdated:
    """A tracking event changed the parcel's current status."""

    __version__ = 1

    tracking_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    status_text = String(max_length=255)
    location = String(max_length=255)
    description = Text()
    source = String(required=True)
    is_important = Boolean(default=False)
    notify_user = Boolean(default=True)
    event_time = DateTime(required=True)
