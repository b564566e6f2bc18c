"""Read-side helpers for orders."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.ordering.order.order import Order, OrderStatus
from storefront.ordering.projections.order_summary import OrderSummary
from storefront.shared.access import Actor
from storefront.shared.dates import date_range_filters, parse_date
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, iter_all, paginate


@dataclass
class OrderFilters:
    status: str | None = None
    payment_status: str | None = None
    user_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None


@dataclass
class OrderStats:
    total_orders: int = 0
    created: int = 0
    confirmed: int = 0
    shipped: int = 0
    delivered: int = 0
    cancelled: int = 0
    paid_orders: int = 0
    revenue: float = 0.0


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound(f"Order {order_id} not found", field="order_id") from None


def get_order(order_id, actor: Actor) -> Order:
    order = load_order(order_id)
    actor.require_owner(order.user_id, "order")
    return order


def find_summary_by_number(order_number: str) -> OrderSummary | None:
    rows = current_domain.repository_for(OrderSummary)._dao.query.filter(order_number=order_number).all().items
    return rows[0] if rows else None


def get_order_by_number(order_number: str, actor: Actor) -> Order:
    summary = find_summary_by_number(order_number)
    if summary is None:
        raise NotFound(f"Order {order_number} not found", field="order_number")
    return get_order(summary.order_id, actor)


def prior_order_count(user_id) -> int:
    """Orders the user has placed that were not cancelled."""
    rows = current_domain.repository_for(OrderSummary)._dao.query.filter(user_id=str(user_id))
    return sum(1 for row in iter_all(rows) if row.status != OrderStatus.CANCELLED.value)


def list_orders(filters: OrderFilters, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if filters.status:
        criteria["status"] = filters.status
    if filters.payment_status:
        criteria["payment_status"] = filters.payment_status
    if filters.user_id:
        criteria["user_id"] = filters.user_id
    criteria.update(
        date_range_filters(
            "created_at",
            parse_date(filters.start_date, "start_date"),
            parse_date(filters.end_date, "end_date"),
        )
    )

    query = current_domain.repository_for(OrderSummary)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def order_to_dict(order: Order) -> dict:
    data = order.to_dict()
    data["items"] = [item.to_dict() for item in order.items]
    return data


def order_stats() -> OrderStats:
    stats = OrderStats()
    for row in iter_all(current_domain.repository_for(OrderSummary)._dao.query):
        stats.total_orders += 1
        setattr(stats, row.status, getattr(stats, row.status) + 1)
        if row.payment_status == "paid":
            stats.paid_orders += 1
            stats.revenue += row.total
    stats.revenue = round(stats.revenue, 2)
    return stats
