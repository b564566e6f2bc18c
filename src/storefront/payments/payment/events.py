"""Domain events for the Payment aggregate.

Persisted to the event store, they rebuild Payment state on replay, feed the
PaymentRecord projection and drive the order's payment status.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Payment")
class PaymentLinkCreated:
    """A payment request was registered with the gateway for an order."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(required=True)
    gateway_name = String(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    checkout_url = Text()
    qr_code = Text()
    account_number = String()
    account_name = String()
    reference = String()
    expires_at = DateTime()
    created_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentSucceeded:
    """Money was received for the order."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(required=True)
    amount = Float(required=True)
    transaction_id = String()
    reference = String()
    paid_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentFailed:
    """The gateway reported that the payment failed."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentCancelled:
    """The payment request was withdrawn before money arrived."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    order_code = Integer(required=True)
    method = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
