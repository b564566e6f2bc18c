"""Cash-on-delivery adapter. No external calls: the courier collects payment."""

from datetime import datetime

from storefront.payments.gateway.port import LinkItem, PaymentGateway, PaymentInfo, PaymentLink
from storefront.utils.logging import logger


class CashOnDeliveryGateway(PaymentGateway):
    name = "cod"

    def create_payment_link(
        self,
        order_code: int,
        amount: float,  # noqa: ARG002
        description: str,  # noqa: ARG002
        items: list[LinkItem],  # noqa: ARG002
        expires_at: datetime,
    ) -> PaymentLink:
        return PaymentLink(order_code=order_code, reference=f"COD-{order_code}", expires_at=expires_at)

    def get_payment_info(self, order_code: int) -> PaymentInfo:
        # Collected on delivery; until then the payment stays pending.
        return PaymentInfo(
            order_code=order_code,
            status="pending",
            transaction_id=f"COD-{order_code}",
            reference=f"COD-REF-{order_code}",
            description="Cash on delivery",
        )

    def cancel_payment(self, order_code: int, reason: str) -> None:
        logger.info("COD payment cancelled", order_code=order_code, reason=reason)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:  # noqa: ARG002
        return False
