"""Payment gateway port (abstract interface).

Every payment method is served by an adapter behind this contract: PayOS for
VietQR in production, the fake adapter in development and tests, and the
cash-on-delivery adapter which never leaves the process.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from storefront.shared.errors import DomainError

PAYOS_STATUS_CODES = {
    "00": "paid",
    "01": "pending",
    "02": "failed",
    "03": "cancelled",
}


def status_from_code(code) -> str:
    """Map a PayOS result code to a payment status. Unknown codes stay pending."""
    return PAYOS_STATUS_CODES.get(str(code) if code is not None else "", "pending")


@dataclass(frozen=True)
class LinkItem:
    name: str
    quantity: int
    price: int


@dataclass(frozen=True)
class PaymentLink:
    """What a customer needs to pay: a checkout URL and QR payload, or a COD reference."""

    order_code: int
    checkout_url: str | None = None
    qr_code: str | None = None
    account_number: str | None = None
    account_name: str | None = None
    reference: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class PaymentInfo:
    """The gateway's view of a payment, from a status query or a webhook."""

    order_code: int
    status: str
    amount: float | None = None
    transaction_id: str | None = None
    reference: str | None = None
    description: str | None = None


def decode_webhook(payload: bytes) -> PaymentInfo:
    """Parse a PayOS-style webhook body ``{code, desc, data: {orderCode, code, ...}}``."""
    try:
        body = json.loads(payload)
        data = body.get("data") or {}
        order_code = int(data["orderCode"])
    except (ValueError, TypeError, KeyError, AttributeError):
        raise DomainError("Malformed webhook payload", field="payload") from None

    code = data.get("code", body.get("code"))
    return PaymentInfo(
        order_code=order_code,
        status=status_from_code(code),
        amount=data.get("amount"),
        transaction_id=data.get("transactionId") or data.get("reference"),
        reference=data.get("reference"),
        description=data.get("description") or data.get("desc"),
    )


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    name: str = "gateway"

    @abstractmethod
    def create_payment_link(
        self,
        order_code: int,
        amount: float,
        description: str,
        items: list[LinkItem],
        expires_at: datetime,
    ) -> PaymentLink:
        """Register a payment request with the gateway."""
        ...

    @abstractmethod
    def get_payment_info(self, order_code: int) -> PaymentInfo:
        """Ask the gateway for the current state of a payment."""
        ...

    @abstractmethod
    def cancel_payment(self, order_code: int, reason: str) -> None:
        """Cancel an outstanding payment request."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Check that a webhook body was signed by the gateway."""
        ...

    def parse_webhook(self, payload: bytes) -> PaymentInfo:
        return decode_webhook(payload)
