"""OrderTracking aggregate (CQRS): where an order's parcel is right now.

One tracking record per order, identified publicly by its carrier tracking
number. Every status change is kept as a TrackingEvent, whether it came from
staff, from a carrier webhook or from a sync.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String, Text

from storefront.domain import storefront
from storefront.shipping.tracking.events import TrackingCreated, TrackingStatusUpdated


class TrackingStatus(Enum):
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class TrackingEventType(Enum):
    PICKUP = "pickup"
    TRANSIT = "transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class TrackingSource(Enum):
    API = "api"
    WEBHOOK = "webhook"
    MANUAL = "manual"
    SYNC = "sync"


_EVENT_TYPES = {
    TrackingStatus.PICKED_UP: TrackingEventType.PICKUP,
    TrackingStatus.IN_TRANSIT: TrackingEventType.TRANSIT,
    TrackingStatus.OUT_FOR_DELIVERY: TrackingEventType.OUT_FOR_DELIVERY,
    TrackingStatus.DELIVERED: TrackingEventType.DELIVERED,
    TrackingStatus.FAILED: TrackingEventType.FAILED,
    TrackingStatus.RETURNED: TrackingEventType.RETURNED,
    TrackingStatus.CANCELLED: TrackingEventType.CANCELLED,
}

IMPORTANT_STATUSES = {
    TrackingStatus.PICKED_UP,
    TrackingStatus.OUT_FOR_DELIVERY,
    TrackingStatus.DELIVERED,
    TrackingStatus.FAILED,
    TrackingStatus.RETURNED,
}

STATUS_TEXT = {
    TrackingStatus.PENDING: "Order created, awaiting pickup",
    TrackingStatus.PICKED_UP: "Picked up by carrier",
    TrackingStatus.IN_TRANSIT: "In transit",
    TrackingStatus.OUT_FOR_DELIVERY: "Out for delivery",
    TrackingStatus.DELIVERED: "Delivered",
    TrackingStatus.FAILED: "Delivery failed",
    TrackingStatus.RETURNED: "Returned to sender",
    TrackingStatus.CANCELLED: "Shipment cancelled",
}

TRACKING_FIELDS = (
    "carrier",
    "carrier_code",
    "tracking_url",
    "estimated_delivery",
    "location",
    "description",
    "auto_sync",
    "notify_user",
    "is_active",
)


def parse_status(value: str | None) -> TrackingStatus:
    try:
        return TrackingStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError({"status": [f"Unknown tracking status '{value}'"]}) from None


def event_type_for(status: TrackingStatus) -> TrackingEventType:
    """Carrier statuses without a dedicated event type count as transit."""
    return _EVENT_TYPES.get(status, TrackingEventType.TRANSIT)


@storefront.entity(part_of="OrderTracking")
class TrackingEvent:
    status = String(required=True, max_length=50)
    status_text = String(max_length=255)
    location = String(max_length=255)
    description = Text()
    event_type = String(required=True, max_length=50)
    event_code = String(max_length=50)
    is_important = Boolean(default=False)
    source = String(choices=TrackingSource, default=TrackingSource.MANUAL.value)
    source_data = Text()  # JSON payload as received
    event_time = DateTime(required=True)
    created_at = DateTime()


@storefront.aggregate
class OrderTracking:
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=30)
    user_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    carrier = String(required=True, max_length=100)
    carrier_code = String(max_length=50)
    status = String(choices=TrackingStatus, default=TrackingStatus.PENDING.value)
    status_text = String(max_length=255)
    location = String(max_length=255)
    description = Text()
    estimated_delivery = DateTime()
    actual_delivery = DateTime()
    tracking_url = String(max_length=500)
    last_updated_at = DateTime()
    last_sync_at = DateTime()
    auto_sync = Boolean(default=True)
    notify_user = Boolean(default=True)
    is_active = Boolean(default=True)
    events = HasMany(TrackingEvent)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def tracking_number_must_not_be_blank(self):
        if self.tracking_number is not None and not self.tracking_number.strip():
            raise ValidationError({"tracking_number": ["Tracking number cannot be blank"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order, tracking_number, carrier, created_by=None, **options):
        now = datetime.now(UTC)
        tracking = cls(
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            tracking_number=tracking_number.strip(),
            carrier=carrier,
            status=TrackingStatus.PENDING.value,
            status_text=STATUS_TEXT[TrackingStatus.PENDING],
            last_updated_at=now,
            created_at=now,
            updated_at=now,
            **{key: value for key, value in options.items() if value is not None},
        )
        tracking.add_events(
            TrackingEvent(
                status=TrackingStatus.PENDING.value,
                status_text=STATUS_TEXT[TrackingStatus.PENDING],
                event_type=TrackingEventType.PICKUP.value,
                event_code="CREATED",
                is_important=True,
                source=TrackingSource.MANUAL.value,
                event_time=now,
                created_at=now,
            )
        )
        tracking.raise_(
            TrackingCreated(
                tracking_id=str(tracking.id),
                order_id=tracking.order_id,
                order_number=tracking.order_number,
                user_id=tracking.user_id,
                tracking_number=tracking.tracking_number,
                carrier=carrier,
                created_by=created_by,
                created_at=now,
            )
        )
        return tracking

    def update(self, **changes):
        for key, value in changes.items():
            if value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------
    def record_event(
        self,
        status,
        status_text=None,
        location=None,
        description=None,
        event_code=None,
        source=TrackingSource.MANUAL.value,
        source_data=None,
        event_time=None,
        is_important=None,
    ) -> TrackingEvent:
        """Append a tracking event and move the parcel to its status."""
        target = parse_status(status)
        now = datetime.now(UTC)
        event_time = event_time or now
        status_text = status_text or STATUS_TEXT[target]
        is_important = target in IMPORTANT_STATUSES if is_important is None else is_important

        event = TrackingEvent(
            status=target.value,
            status_text=status_text,
            location=location,
            description=description,
            event_type=event_type_for(target).value,
            event_code=event_code,
            is_important=is_important,
            source=TrackingSource(source).value,
            source_data=source_data,
            event_time=event_time,
            created_at=now,
        )
        self.add_events(event)

        previous = self.status
        self.status = target.value
        self.status_text = status_text
        if location:
            self.location = location
        if description:
            self.description = description
        if target == TrackingStatus.DELIVERED:
            self.actual_delivery = event_time
        self.last_updated_at = now
        if source == TrackingSource.SYNC.value:
            self.last_sync_at = now
        self.updated_at = now

        self.raise_(
            TrackingStatusUpdated(
                tracking_id=str(self.id),
                order_id=str(self.order_id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                previous_status=previous,
                status=target.value,
                status_text=status_text,
                location=location,
                description=description,
                source=event.source,
                is_important=is_important,
                notify_user=bool(self.notify_user),
                event_time=event_time,
            )
        )
        return event

    def timeline(self) -> list[TrackingEvent]:
        """Events newest first."""
        return sorted(self.events, key=lambda event: _aware(event.event_time), reverse=True)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)
