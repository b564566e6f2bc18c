"""Read-side helpers for payments."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.ordering.queries import load_order
from storefront.payments.payment.payment import Payment, PaymentStatus
from storefront.payments.projections.payment_record import PaymentRecord
from storefront.shared.access import Actor
from storefront.shared.errors import NotFound


def load_payment(payment_id) -> Payment:
    try:
        return current_domain.repository_for(Payment).get(payment_id)
    except ObjectNotFoundError:
        raise NotFound(f"Payment {payment_id} not found", field="payment_id") from None


def find_by_order_code(order_code: int) -> PaymentRecord | None:
    rows = current_domain.repository_for(PaymentRecord)._dao.query.filter(order_code=int(order_code)).all().items
    return rows[0] if rows else None


def load_by_order_code(order_code: int) -> Payment:
    record = find_by_order_code(order_code)
    if record is None:
        raise NotFound(f"Payment with order code {order_code} not found", field="order_code")
    return load_payment(record.payment_id)


def payments_for_order(order_id) -> list[PaymentRecord]:
    query = current_domain.repository_for(PaymentRecord)._dao.query.filter(order_id=str(order_id))
    return query.order_by("-created_at").all().items


def pending_payment_for(order_id, method: str) -> Payment | None:
    """The order's outstanding, unexpired payment request for ``method``, if any."""
    for record in payments_for_order(order_id):
        if record.method != method or record.status != PaymentStatus.PENDING.value:
            continue
        payment = load_payment(record.payment_id)
        if not payment.is_expired():
            return payment
    return None


def get_payment_for_order(order_id, actor: Actor) -> Payment:
    """The most recent payment of an order the caller may see."""
    order = load_order(order_id)
    actor.require_owner(order.user_id, "order")
    records = payments_for_order(order.id)
    if not records:
        raise NotFound(f"No payment found for order {order_id}", field="order_id")
    return load_payment(records[0].payment_id)
