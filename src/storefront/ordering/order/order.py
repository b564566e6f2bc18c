"""Order aggregate (Event Sourced): an immutable snapshot of a purchase.

Items, amounts and addresses are fixed when the order is created. Afterwards
only the status fields move, and only through the discrete transitions below.

State Machine:
    CREATED → CONFIRMED → SHIPPED → DELIVERED
    CANCELLED is reachable from CREATED, CONFIRMED and SHIPPED.
"""

import json
import secrets
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderPaymentStatusChanged,
    OrderShipped,
)
from storefront.shared.errors import BusinessRuleViolation, DomainError, InvalidTransition


class OrderStatus(Enum):
    CREATED = "created"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ShippingStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    COD = "cod"
    VIETQR = "vietqr"


_VALID_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def generate_order_number(moment: datetime | None = None) -> str:
    """``ORD-YYYYMMDD-XXXXXX`` with six random digits."""
    moment = moment or datetime.now(UTC)
    return f"ORD-{moment:%Y%m%d}-{secrets.randbelow(1_000_000):06d}"


def parse_payment_method(value: str | None) -> PaymentMethod:
    try:
        return PaymentMethod((value or PaymentMethod.COD.value).lower())
    except ValueError:
        raise DomainError(f"Unsupported payment method: {value}", field="payment_method") from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderAmounts:
    """Money locked at checkout. ``total`` never changes afterwards."""

    subtotal = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    discount_amount = Float(default=0.0)
    points_discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="VND")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(max_length=50)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(default=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@storefront.aggregate(is_event_sourced=True)
class Order:
    order_number = String(max_length=30)
    user_id = Identifier(required=True)
    placed_by = Identifier()
    cart_id = Identifier()
    status = String(choices=OrderStatus, default=OrderStatus.CREATED.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    shipping_status = String(choices=ShippingStatus, default=ShippingStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_id = Identifier()
    items = HasMany(OrderItem)
    amounts = ValueObject(OrderAmounts)
    shipping_address = Text()
    shipping_provider = String(max_length=50)
    billing_address = Text()
    notes = Text()
    coupon_code = String(max_length=50)
    points_redeemed = Integer(default=0)
    tracking_number = String(max_length=255)
    cancellation_reason = String(max_length=500)
    cancelled_by = Identifier()
    confirmed_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        items_data,
        payment_method,
        placed_by=None,
        cart_id=None,
        shipping_address=None,
        billing_address=None,
        notes=None,
        shipping_fee=0.0,
        shipping_provider=None,
        coupon_code=None,
        discount_amount=0.0,
        points_redeemed=0,
        currency="VND",
        order_number=None,
    ):
        """Create an order from priced lines.

        Args:
            items_data: list of dicts with product_id, variant_id, sku, name,
                        quantity and unit_price.
        """
        if not items_data:
            raise BusinessRuleViolation("An order needs at least one item", field="items")

        now = datetime.now(UTC)
        lines = [
            {
                **item,
                "id": str(uuid4()),
                "line_total": round(item["unit_price"] * item["quantity"], 2),
            }
            for item in items_data
        ]
        subtotal = round(sum(line["line_total"] for line in lines), 2)

        points_discount = float(points_redeemed or 0)
        if (discount_amount or 0.0) + points_discount > subtotal:
            raise BusinessRuleViolation("Discounts cannot exceed the order subtotal", field="points_to_redeem")
        total = round(subtotal + (shipping_fee or 0.0) - (discount_amount or 0.0) - points_discount, 2)

        order = cls._create_new()
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number or generate_order_number(now),
                user_id=str(user_id),
                placed_by=str(placed_by or user_id),
                cart_id=str(cart_id) if cart_id else None,
                items=json.dumps(lines),
                shipping_address=shipping_address,
                billing_address=billing_address,
                notes=notes,
                payment_method=parse_payment_method(payment_method).value,
                coupon_code=coupon_code,
                points_redeemed=points_redeemed or 0,
                subtotal=subtotal,
                shipping_fee=shipping_fee or 0.0,
                shipping_provider=shipping_provider,
                discount_amount=discount_amount or 0.0,
                points_discount=points_discount,
                total=total,
                currency=currency,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def total(self) -> float:
        return self.amounts.total if self.amounts else 0.0

    @property
    def is_shipped(self) -> bool:
        return self.status in (OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value)

    def stock_lines(self):
        return [(item.product_id, item.variant_id, item.quantity) for item in self.items]

    def _assert_can_transition(self, target: OrderStatus):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot move order from {current.value} to {target.value}")

    def _event_fields(self) -> dict:
        return {
            "order_id": str(self.id),
            "order_number": self.order_number,
            "user_id": str(self.user_id),
        }

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def confirm(self, confirmed_by=None):
        self._assert_can_transition(OrderStatus.CONFIRMED)
        self.raise_(OrderConfirmed(confirmed_by=confirmed_by, confirmed_at=datetime.now(UTC), **self._event_fields()))

    def ship(self, tracking_number):
        if not tracking_number or not tracking_number.strip():
            raise DomainError("Tracking number is required to ship an order", field="tracking_number")
        self._assert_can_transition(OrderStatus.SHIPPED)
        self.raise_(
            OrderShipped(
                tracking_number=tracking_number.strip(),
                shipped_at=datetime.now(UTC),
                **self._event_fields(),
            )
        )

    def deliver(self):
        """Mark delivered. Cash-on-delivery orders are paid at the door."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        self.raise_(OrderDelivered(total=self.total, delivered_at=datetime.now(UTC), **self._event_fields()))
        if self.payment_method == PaymentMethod.COD.value:
            self.record_payment(PaymentStatus.PAID.value)

    def cancel(self, reason, cancelled_by=None):
        if not reason or not reason.strip():
            raise DomainError("A cancellation reason is required", field="reason")
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.raise_(
            OrderCancelled(
                previous_status=self.status,
                reason=reason.strip(),
                cancelled_by=cancelled_by,
                cancelled_at=datetime.now(UTC),
                **self._event_fields(),
            )
        )

    def record_payment(self, payment_status, payment_id=None) -> bool:
        """Move the payment status. Returns False when it is already there."""
        target = PaymentStatus(payment_status)
        if self.payment_status == target.value:
            return False
        if self.payment_status == PaymentStatus.PAID.value:
            raise InvalidTransition(f"Order {self.order_number} is already paid")

        self.raise_(
            OrderPaymentStatusChanged(
                previous_status=self.payment_status,
                payment_status=target.value,
                payment_id=payment_id,
                changed_at=datetime.now(UTC),
                **self._event_fields(),
            )
        )
        return True

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_created(self, event: OrderCreated):
        self.id = event.order_id
        self.order_number = event.order_number
        self.user_id = event.user_id
        self.placed_by = event.placed_by
        self.cart_id = event.cart_id
        self.status = OrderStatus.CREATED.value
        self.payment_status = PaymentStatus.PENDING.value
        self.shipping_status = ShippingStatus.PENDING.value
        self.payment_method = event.payment_method
        self.items = [OrderItem(**line) for line in json.loads(event.items)]
        self.shipping_address = event.shipping_address
        self.shipping_provider = event.shipping_provider
        self.billing_address = event.billing_address
        self.notes = event.notes
        self.coupon_code = event.coupon_code
        self.points_redeemed = event.points_redeemed or 0
        self.amounts = OrderAmounts(
            subtotal=event.subtotal,
            shipping_fee=event.shipping_fee or 0.0,
            discount_amount=event.discount_amount or 0.0,
            points_discount=event.points_discount or 0.0,
            total=event.total,
            currency=event.currency or "VND",
        )
        self.created_at = event.created_at
        self.updated_at = event.created_at

    @apply
    def _on_order_confirmed(self, event: OrderConfirmed):
        self.status = OrderStatus.CONFIRMED.value
        self.confirmed_at = event.confirmed_at
        self.updated_at = event.confirmed_at

    @apply
    def _on_order_shipped(self, event: OrderShipped):
        self.status = OrderStatus.SHIPPED.value
        self.shipping_status = ShippingStatus.SHIPPED.value
        self.tracking_number = event.tracking_number
        self.shipped_at = event.shipped_at
        self.updated_at = event.shipped_at

    @apply
    def _on_order_delivered(self, event: OrderDelivered):
        self.status = OrderStatus.DELIVERED.value
        self.shipping_status = ShippingStatus.DELIVERED.value
        self.delivered_at = event.delivered_at
        self.updated_at = event.delivered_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        if self.shipping_status == ShippingStatus.PENDING.value:
            self.shipping_status = ShippingStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.cancelled_by = event.cancelled_by
        self.cancelled_at = event.cancelled_at
        self.updated_at = event.cancelled_at

    @apply
    def _on_payment_status_changed(self, event: OrderPaymentStatusChanged):
        self.payment_status = event.payment_status
        if event.payment_id:
            self.payment_id = event.payment_id
        if event.payment_status == PaymentStatus.PAID.value:
            self.paid_at = event.changed_at
        self.updated_at = event.changed_at
