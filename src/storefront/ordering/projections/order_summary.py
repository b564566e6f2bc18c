"""Order summary: one row per order for listings and number lookups."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderPaymentStatusChanged,
    OrderShipped,
)
from storefront.ordering.order.order import Order, OrderStatus, PaymentStatus, ShippingStatus


@storefront.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=30)
    user_id = Identifier(required=True)
    placed_by = Identifier()
    status = String(required=True, max_length=20)
    payment_status = String(max_length=20)
    shipping_status = String(max_length=20)
    payment_method = String(max_length=20)
    item_count = Integer(default=0)
    total_quantity = Integer(default=0)
    total = Float(default=0.0)
    coupon_code = String(max_length=50)
    tracking_number = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderCreated)
    def on_order_created(self, event):
        lines = json.loads(event.items)
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                user_id=event.user_id,
                placed_by=event.placed_by,
                status=OrderStatus.CREATED.value,
                payment_status=PaymentStatus.PENDING.value,
                shipping_status=ShippingStatus.PENDING.value,
                payment_method=event.payment_method,
                item_count=len(lines),
                total_quantity=sum(line["quantity"] for line in lines),
                total=event.total,
                coupon_code=event.coupon_code,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    def _update(self, order_id, updated_at, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        for field, value in changes.items():
            setattr(summary, field, value)
        summary.updated_at = updated_at
        repo.add(summary)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        self._update(event.order_id, event.confirmed_at, status=OrderStatus.CONFIRMED.value)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update(
            event.order_id,
            event.shipped_at,
            status=OrderStatus.SHIPPED.value,
            shipping_status=ShippingStatus.SHIPPED.value,
            tracking_number=event.tracking_number,
        )

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update(
            event.order_id,
            event.delivered_at,
            status=OrderStatus.DELIVERED.value,
            shipping_status=ShippingStatus.DELIVERED.value,
        )

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        changes = {"status": OrderStatus.CANCELLED.value}
        if event.previous_status in (OrderStatus.CREATED.value, OrderStatus.CONFIRMED.value):
            changes["shipping_status"] = ShippingStatus.CANCELLED.value
        self._update(event.order_id, event.cancelled_at, **changes)

    @on(OrderPaymentStatusChanged)
    def on_payment_status_changed(self, event):
        self._update(event.order_id, event.changed_at, payment_status=event.payment_status)
