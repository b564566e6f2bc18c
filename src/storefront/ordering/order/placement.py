"""Order placement shared by direct orders and cart checkout.

Pricing, the shipping quote, coupon redemption and point redemption all
happen here, inside the caller's Unit of Work, so a failure at any step
leaves nothing behind.
"""

import json

from protean.utils.globals import current_domain

from storefront import config
from storefront.catalogue.product.management import load_product
from storefront.ordering.order.order import Order, generate_order_number
from storefront.ordering.queries import find_summary_by_number, prior_order_count
from storefront.promotions.coupon.redemption import use_coupon
from storefront.promotions.coupon.validation import validate_coupon
from storefront.promotions.points.ledger import balance_of, redeem_points
from storefront.shared.errors import (
    DomainError,
    InsufficientPoints,
    InvalidCoupon,
    NotFound,
    ProductNotFound,
    ProductUnavailable,
)
from storefront.shipping.provider.quotes import shipping_fee_for
from storefront.utils.logging import logger

_ORDER_NUMBER_ATTEMPTS = 5


def parse_lines(raw) -> list[tuple]:
    """Decode ``[{product_id, variant_id?, quantity}]`` into (product, variant, quantity) tuples."""
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise DomainError("Items must be a JSON array", field="items") from None
    if not items:
        raise DomainError("An order needs at least one item", field="items")

    lines = []
    for item in items:
        quantity = int(item.get("quantity") or 0)
        if not item.get("product_id") or quantity <= 0:
            raise DomainError("Each item needs a product_id and a positive quantity", field="items")
        lines.append((str(item["product_id"]), item.get("variant_id") or None, quantity))
    return lines


def price_lines(lines) -> list[dict]:
    """Snapshot each line at the product's current price."""
    priced = []
    for product_id, variant_id, quantity in lines:
        try:
            product = load_product(product_id)
        except NotFound:
            raise ProductNotFound(product_id) from None
        if not product.is_active:
            raise ProductUnavailable(product_id)

        variant = product.find_variant(variant_id) if variant_id else None
        if variant_id and variant is None:
            raise ProductNotFound(product_id, variant_id)
        if variant is not None and not variant.is_active:
            raise ProductUnavailable(product_id)

        priced.append(
            {
                "product_id": str(product.id),
                "variant_id": str(variant.id) if variant else None,
                "sku": variant.sku if variant else product.sku,
                "name": f"{product.name} - {variant.name}" if variant and variant.name else product.name,
                "quantity": quantity,
                "unit_price": variant.price if variant else product.price,
            }
        )
    return priced


def unique_order_number() -> str:
    for _ in range(_ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if find_summary_by_number(candidate) is None:
            return candidate
    raise DomainError("Could not allocate an order number, retry the request", field="order_number")


def place_order(
    user_id,
    lines,
    payment_method,
    placed_by=None,
    cart_id=None,
    shipping_address=None,
    billing_address=None,
    notes=None,
    coupon_code=None,
    points_to_redeem=0,
    shipping_provider=None,
) -> Order:
    """Create and save an order, redeeming any coupon and points in the same Unit of Work."""
    priced = price_lines(lines)
    subtotal = round(sum(line["unit_price"] * line["quantity"] for line in priced), 2)
    shipping = shipping_fee_for(shipping_address, subtotal, payment_method, shipping_provider)
    shipping_fee = shipping.fee
    prior_orders = prior_order_count(user_id)

    discount = 0.0
    if coupon_code:
        result = validate_coupon(
            coupon_code,
            user_id=user_id,
            order_amount=subtotal,
            prior_orders=prior_orders,
            shipping_fee=shipping_fee,
        )
        if not result.valid:
            raise InvalidCoupon(result.message)
        discount = result.discount_amount
        coupon_code = result.coupon.code

    points_to_redeem = points_to_redeem or 0
    if points_to_redeem:
        balance = balance_of(user_id)
        if points_to_redeem > balance:
            raise InsufficientPoints(balance=balance, requested=points_to_redeem)

    order = Order.create(
        user_id=user_id,
        items_data=priced,
        payment_method=payment_method,
        placed_by=placed_by,
        cart_id=cart_id,
        shipping_address=shipping_address,
        billing_address=billing_address,
        notes=notes,
        shipping_fee=shipping_fee,
        shipping_provider=shipping.provider_code,
        coupon_code=coupon_code,
        discount_amount=discount,
        points_redeemed=points_to_redeem,
        currency=config.CURRENCY,
        order_number=unique_order_number(),
    )

    if coupon_code:
        use_coupon(
            coupon_code,
            user_id=user_id,
            order_id=order.id,
            order_amount=subtotal,
            prior_orders=prior_orders,
            shipping_fee=shipping_fee,
        )
    if points_to_redeem:
        redeem_points(
            user_id,
            points_to_redeem,
            reference=order.order_number,
            description=f"Redeemed on order {order.order_number}",
        )

    current_domain.repository_for(Order).add(order)
    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        user_id=str(user_id),
        total=order.total,
        shipping_provider=order.shipping_provider,
        coupon_code=coupon_code,
        points_redeemed=points_to_redeem,
    )
    return order
