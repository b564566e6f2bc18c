"""Configurable fake VietQR gateway for development and testing.

Simulates PayOS without any external calls. It can be configured at runtime
to succeed or fail, and it records every call so tests can assert on them.
Webhooks are accepted when signed with ``test-signature``.
"""

from datetime import datetime

from storefront.payments.gateway.port import LinkItem, PaymentGateway, PaymentInfo, PaymentLink
from storefront.shared.errors import PaymentGatewayError

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    name = "fake"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined"
        self.payment_status: str = "paid"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment declined", payment_status: str = "paid"):
        """Configure gateway behaviour at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.payment_status = payment_status

    def create_payment_link(
        self,
        order_code: int,
        amount: float,
        description: str,
        items: list[LinkItem],
        expires_at: datetime,
    ) -> PaymentLink:
        self.calls.append(
            {
                "method": "create_payment_link",
                "order_code": order_code,
                "amount": amount,
                "description": description,
                "items": len(items),
            }
        )
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason, field="gateway")

        return PaymentLink(
            order_code=order_code,
            checkout_url=f"https://pay.fake.local/web/{order_code}",
            qr_code=f"FAKEQR{order_code}",
            account_number="0000000000",
            account_name="STOREFRONT",
            reference=f"fake_link_{order_code}",
            expires_at=expires_at,
        )

    def get_payment_info(self, order_code: int) -> PaymentInfo:
        self.calls.append({"method": "get_payment_info", "order_code": order_code})
        status = self.payment_status if self.should_succeed else "failed"
        return PaymentInfo(
            order_code=order_code,
            status=status,
            transaction_id=f"fake_txn_{order_code}" if status == "paid" else None,
            reference=f"fake_ref_{order_code}",
            description=None if self.should_succeed else self.failure_reason,
        )

    def cancel_payment(self, order_code: int, reason: str) -> None:
        self.calls.append({"method": "cancel_payment", "order_code": order_code, "reason": reason})
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason, field="gateway")

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:  # noqa: ARG002
        return signature == TEST_SIGNATURE
