"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderCreated:
    """A new order was placed. Carries the full snapshot so replay needs nothing else."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    placed_by = Identifier(required=True)
    cart_id = Identifier()
    items = Text(required=True)  # JSON array of order lines
    shipping_address = Text()
    billing_address = Text()
    notes = Text()
    payment_method = String(required=True)
    coupon_code = String()
    points_redeemed = Integer(default=0)
    subtotal = Float(required=True)
    shipping_fee = Float(default=0.0)
    shipping_provider = String()
    discount_amount = Float(default=0.0)
    points_discount = Float(default=0.0)
    total = Float(required=True)
    currency = String(default="VND")
    created_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    confirmed_by = Identifier()
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    tracking_number = String(required=True)
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    total = Float(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(required=True)
    cancelled_by = Identifier()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True)
    payment_status = String(required=True)
    payment_id = Identifier()
    changed_at = DateTime(required=True)
