"""Read-side helpers for shipping providers and order tracking."""

from collections import Counter
from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from storefront.ordering.queries import load_order
from storefront.shared.access import Actor, Role
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, iter_all, paginate, paginate_list
from storefront.shipping.provider.provider import ShippingProvider
from storefront.shipping.tracking.management import find_tracking, load_tracking
from storefront.shipping.tracking.tracking import OrderTracking, TrackingStatus


@dataclass
class TrackingFilters:
    status: str | None = None
    carrier: str | None = None
    carrier_code: str | None = None
    is_active: bool | None = None


@dataclass
class TrackingStats:
    total: int = 0
    active: int = 0
    by_status: dict = field(default_factory=dict)
    by_carrier: dict = field(default_factory=dict)
    delivery_rate: float = 0.0


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------
def list_providers(active_only: bool = False, page: int | None = None, limit: int | None = None) -> Page:
    query = current_domain.repository_for(ShippingProvider)._dao.query
    if active_only:
        query = query.filter(is_active=True)
    return paginate(query.order_by("-priority"), page, limit)


def provider_to_dict(provider: ShippingProvider, include_secret: bool = False) -> dict:
    data = provider.to_dict()
    data["rates"] = [rate.to_dict() for rate in provider.rates]
    if not include_secret:
        data.pop("webhook_secret", None)
        data["has_webhook_secret"] = bool(provider.webhook_secret)
    return data


def public_provider(provider: ShippingProvider) -> dict:
    """What a shopper sees when choosing a carrier."""
    return {
        "code": provider.code,
        "name": provider.display_name,
        "description": provider.description,
        "website": provider.website,
        "supports_cod": provider.supports_cod,
        "supports_tracking": provider.supports_tracking,
        "is_default": provider.is_default,
    }


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------
def tracking_to_dict(tracking: OrderTracking) -> dict:
    data = tracking.to_dict()
    data["events"] = [event.to_dict() for event in tracking.timeline()]
    return data


def get_tracking(tracking_id, actor: Actor) -> OrderTracking:
    tracking = load_tracking(tracking_id)
    actor.require_owner(tracking.user_id, "order")
    return tracking


def tracking_for_order(order_id, actor: Actor) -> OrderTracking:
    order = load_order(order_id)
    actor.require_owner(order.user_id, "order")
    tracking = find_tracking(order_id=str(order.id))
    if tracking is None:
        raise NotFound(f"Order {order.order_number} has no tracking yet", field="order_id")
    return tracking


def public_tracking(tracking_number: str) -> dict:
    """Anyone holding the tracking number may follow the parcel, without order or customer details."""
    tracking = find_tracking(tracking_number=(tracking_number or "").strip())
    if tracking is None or not tracking.is_active:
        raise NotFound(f"Tracking {tracking_number} not found", field="tracking_number")
    return {
        "tracking_number": tracking.tracking_number,
        "carrier": tracking.carrier,
        "status": tracking.status,
        "status_text": tracking.status_text,
        "location": tracking.location,
        "estimated_delivery": tracking.estimated_delivery,
        "actual_delivery": tracking.actual_delivery,
        "tracking_url": tracking.tracking_url,
        "last_updated_at": tracking.last_updated_at,
        "events": [
            {
                "status": event.status,
                "status_text": event.status_text,
                "location": event.location,
                "event_time": event.event_time,
            }
            for event in tracking.timeline()
        ],
    }


def tracking_events(tracking_id, actor: Actor, page: int | None = None, limit: int | None = None) -> Page:
    tracking = get_tracking(tracking_id, actor)
    return paginate_list([event.to_dict() for event in tracking.timeline()], page, limit)


def list_trackings(actor: Actor, filters: TrackingFilters, page: int | None = None, limit: int | None = None) -> Page:
    actor.require(Role.STAFF)
    criteria = {key: value for key, value in vars(filters).items() if value is not None}
    query = current_domain.repository_for(OrderTracking)._dao.query.filter(**criteria).order_by("-updated_at")
    return paginate(query, page, limit)


def tracking_stats(actor: Actor) -> TrackingStats:
    actor.require(Role.STAFF)
    stats = TrackingStats()
    statuses = Counter()
    carriers = Counter()
    for tracking in iter_all(current_domain.repository_for(OrderTracking)._dao.query):
        stats.total += 1
        if tracking.is_active:
            stats.active += 1
        statuses[tracking.status] += 1
        carriers[tracking.carrier] += 1

    stats.by_status = {status.value: statuses.get(status.value, 0) for status in TrackingStatus}
    stats.by_carrier = dict(carriers)
    if stats.total:
        stats.delivery_rate = round(statuses.get(TrackingStatus.DELIVERED.value, 0) / stats.total * 100, 2)
    return stats
