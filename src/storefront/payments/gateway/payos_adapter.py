"""PayOS (VietQR) payment gateway adapter.

Talks to the PayOS merchant API over HTTPS with ``requests``. Payment
requests are signed with HMAC-SHA256 over the canonical field string
``amount=..&cancelUrl=..&description=..&orderCode=..&returnUrl=..``; webhooks
are verified with the same key over the raw request body.
"""

import hashlib
import hmac
from dataclasses import asdict
from datetime import datetime

import requests

from storefront.payments.gateway.port import LinkItem, PaymentGateway, PaymentInfo, PaymentLink, status_from_code
from storefront.shared.errors import PaymentGatewayError
from storefront.utils.logging import logger

_SUCCESS_CODES = ("0", "00")


def sign(checksum_key: str, data: str | bytes) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hmac.new(checksum_key.encode("utf-8"), data, hashlib.sha256).hexdigest()


def payment_request_signature(
    checksum_key: str,
    amount: int,
    cancel_url: str,
    description: str,
    order_code: int,
    return_url: str,
) -> str:
    canonical = (
        f"amount={amount}&cancelUrl={cancel_url}&description={description}"
        f"&orderCode={order_code}&returnUrl={return_url}"
    )
    return sign(checksum_key, canonical)


class PayOSGateway(PaymentGateway):
    """Production VietQR gateway backed by PayOS."""

    name = "payos"

    def __init__(
        self,
        client_id: str,
        api_key: str,
        checksum_key: str,
        base_url: str = "https://api-merchant.payos.vn",
        return_url: str = "",
        cancel_url: str = "",
        timeout: int = 15,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.api_key = api_key
        self.checksum_key = checksum_key
        self.base_url = base_url.rstrip("/")
        self.return_url = return_url
        self.cancel_url = cancel_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        headers = {
            "Content-Type": "application/json",
            "x-client-id": self.client_id,
            "x-api-key": self.api_key,
        }
        try:
            response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("PayOS request failed", method=method, path=path, error=str(exc))
            raise PaymentGatewayError(f"PayOS request failed: {exc}", field="gateway") from exc

        if str(body.get("code")) not in _SUCCESS_CODES:
            message = body.get("desc") or body.get("message") or "unknown error"
            logger.warning("PayOS rejected request", method=method, path=path, code=body.get("code"), message=message)
            raise PaymentGatewayError(f"PayOS API error: {message}", field="gateway")
        return body.get("data") or {}

    def create_payment_link(
        self,
        order_code: int,
        amount: float,
        description: str,
        items: list[LinkItem],
        expires_at: datetime,
    ) -> PaymentLink:
        amount_vnd = int(round(amount))
        payload = {
            "orderCode": order_code,
            "amount": amount_vnd,
            "description": description,
            "items": [asdict(item) for item in items],
            "returnUrl": self.return_url,
            "cancelUrl": self.cancel_url,
            "expiredAt": int(expires_at.timestamp()),
            "signature": payment_request_signature(
                self.checksum_key,
                amount_vnd,
                self.cancel_url,
                description,
                order_code,
                self.return_url,
            ),
        }
        data = self._request("POST", "/v2/payment-requests", payload)
        logger.info("PayOS payment link created", order_code=order_code, checkout_url=data.get("checkoutUrl"))
        return PaymentLink(
            order_code=int(data.get("orderCode") or order_code),
            checkout_url=data.get("checkoutUrl"),
            qr_code=data.get("qrCode"),
            account_number=data.get("accountNumber"),
            account_name=data.get("accountName"),
            reference=data.get("paymentLinkId"),
            expires_at=expires_at,
        )

    def get_payment_info(self, order_code: int) -> PaymentInfo:
        data = self._request("GET", f"/v2/payment-requests/{order_code}")
        status = (data.get("status") or "").lower()
        if status not in ("paid", "pending", "cancelled", "failed"):
            status = status_from_code(data.get("code"))
        transactions = data.get("transactions") or []
        latest = transactions[-1] if transactions else {}
        return PaymentInfo(
            order_code=int(data.get("orderCode") or order_code),
            status=status,
            amount=data.get("amount"),
            transaction_id=latest.get("reference") or data.get("transactionId"),
            reference=latest.get("reference") or data.get("reference"),
            description=data.get("description"),
        )

    def cancel_payment(self, order_code: int, reason: str) -> None:
        self._request("POST", f"/v2/payment-requests/{order_code}/cancel", {"cancellationReason": reason})
        logger.info("PayOS payment cancelled", order_code=order_code)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        if not signature or not self.checksum_key:
            return False
        return hmac.compare_digest(sign(self.checksum_key, payload), signature)
