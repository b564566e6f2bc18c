"""Audit log: an append-only trail of business actions.

Written by a projector that follows orders, inventory movements, coupon
usage and payments. Entries are never edited; old ones are removed in bulk
by the retention cleanup.
"""

import json
import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.movement.events import (
    MovementApproved,
    MovementCancelled,
    MovementCompleted,
    MovementCreated,
)
from storefront.inventory.movement.movement import InventoryMovement
from storefront.ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderPaymentStatusChanged,
    OrderShipped,
)
from storefront.ordering.order.order import Order
from storefront.payments.payment.events import (
    PaymentCancelled,
    PaymentFailed,
    PaymentLinkCreated,
    PaymentSucceeded,
)
from storefront.payments.payment.payment import Payment
from storefront.promotions.coupon.events import CouponRedeemed
from storefront.promotions.coupon.usage import CouponUsage

SYSTEM_USER = "system"


@storefront.projection
class AuditLog:
    entry_id = Identifier(identifier=True, required=True)
    user_id = Identifier()
    action = String(required=True, max_length=100)
    resource_type = String(required=True, max_length=50)
    resource_id = Identifier(required=True)
    description = String(max_length=500)
    details = Text()  # JSON
    occurred_at = DateTime(required=True)


def record(resource_type, resource_id, action, occurred_at, user_id=None, description=None, **details):
    current_domain.repository_for(AuditLog).add(
        AuditLog(
            entry_id=str(uuid.uuid4()),
            user_id=str(user_id) if user_id else SYSTEM_USER,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id),
            description=description,
            details=json.dumps(details, default=str) if details else None,
            occurred_at=occurred_at,
        )
    )


@storefront.projector(projector_for=AuditLog, aggregates=[Order, InventoryMovement, CouponUsage, Payment])
class AuditLogProjector:
    # --- Orders ---

    @on(OrderCreated)
    def on_order_created(self, event):
        record(
            "order",
            event.order_id,
            "order.created",
            event.created_at,
            user_id=event.placed_by,
            description=f"Order {event.order_number} created",
            order_number=event.order_number,
            owner_id=str(event.user_id),
            total=event.total,
            payment_method=event.payment_method,
        )

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        record(
            "order",
            event.order_id,
            "order.confirmed",
            event.confirmed_at,
            user_id=event.confirmed_by,
            description=f"Order {event.order_number} confirmed",
        )

    @on(OrderShipped)
    def on_order_shipped(self, event):
        record(
            "order",
            event.order_id,
            "order.shipped",
            event.shipped_at,
            description=f"Order {event.order_number} shipped",
            tracking_number=event.tracking_number,
        )

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record(
            "order",
            event.order_id,
            "order.delivered",
            event.delivered_at,
            description=f"Order {event.order_number} delivered",
        )

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record(
            "order",
            event.order_id,
            "order.cancelled",
            event.cancelled_at,
            user_id=event.cancelled_by,
            description=f"Order {event.order_number} cancelled",
            previous_status=event.previous_status,
            reason=event.reason,
        )

    @on(OrderPaymentStatusChanged)
    def on_order_payment_status_changed(self, event):
        record(
            "order",
            event.order_id,
            "order.payment_status_changed",
            event.changed_at,
            description=f"Order {event.order_number} payment {event.previous_status} -> {event.payment_status}",
            payment_id=event.payment_id,
        )

    # --- Inventory movements ---

    @on(MovementCreated)
    def on_movement_created(self, event):
        record(
            "inventory_movement",
            event.movement_id,
            "movement.created",
            event.created_at,
            user_id=event.created_by,
            description=f"{event.movement_type} movement of {event.quantity} created",
            product_id=str(event.product_id),
            reference=event.reference,
        )

    @on(MovementApproved)
    def on_movement_approved(self, event):
        record(
            "inventory_movement",
            event.movement_id,
            "movement.approved",
            event.approved_at,
            user_id=event.approved_by,
            description="Movement approved",
        )

    @on(MovementCompleted)
    def on_movement_completed(self, event):
        record(
            "inventory_movement",
            event.movement_id,
            "movement.completed",
            event.completed_at,
            description=f"{event.movement_type} movement of {event.quantity} completed",
            product_id=str(event.product_id),
            total_cost=event.total_cost,
        )

    @on(MovementCancelled)
    def on_movement_cancelled(self, event):
        record(
            "inventory_movement",
            event.movement_id,
            "movement.cancelled",
            event.cancelled_at,
            description="Movement cancelled",
            reason=event.reason,
        )

    # --- Coupon usage ---

    @on(CouponRedeemed)
    def on_coupon_redeemed(self, event):
        record(
            "coupon",
            event.coupon_id,
            "coupon.used",
            event.used_at,
            user_id=event.user_id,
            description=f"Coupon {event.code} used",
            order_id=str(event.order_id),
            discount_amount=event.discount_amount,
        )

    # --- Payments ---

    @on(PaymentLinkCreated)
    def on_payment_link_created(self, event):
        record(
            "payment",
            event.payment_id,
            "payment.created",
            event.created_at,
            user_id=event.user_id,
            description=f"{event.method} payment for {event.order_number} created",
            order_id=str(event.order_id),
            amount=event.amount,
        )

    @on(PaymentSucceeded)
    def on_payment_succeeded(self, event):
        record(
            "payment",
            event.payment_id,
            "payment.succeeded",
            event.paid_at,
            description=f"Payment for {event.order_number} succeeded",
            amount=event.amount,
            transaction_id=event.transaction_id,
        )

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        record(
            "payment",
            event.payment_id,
            "payment.failed",
            event.failed_at,
            description=f"Payment for {event.order_number} failed",
            reason=event.reason,
        )

    @on(PaymentCancelled)
    def on_payment_cancelled(self, event):
        record(
            "payment",
            event.payment_id,
            "payment.cancelled",
            event.cancelled_at,
            description=f"Payment for {event.order_number} cancelled",
            reason=event.reason,
        )
