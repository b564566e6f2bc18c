"""Tests for the gateway adapters and webhook decoding."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
import requests

from storefront.payments.gateway.cod_adapter import CashOnDeliveryGateway
from storefront.payments.gateway.fake_adapter import TEST_SIGNATURE, FakeGateway
from storefront.payments.gateway.payos_adapter import PayOSGateway, payment_request_signature, sign
from storefront.payments.gateway.port import LinkItem, decode_webhook, status_from_code
from storefront.shared.errors import DomainError, PaymentGatewayError

EXPIRES = datetime.now(UTC) + timedelta(hours=1)


class TestStatusCodes:
    @pytest.mark.parametrize(
        "code, status",
        [
            ("00", "paid"),
            ("01", "pending"),
            ("02", "failed"),
            ("03", "cancelled"),
            ("99", "pending"),
            (None, "pending"),
        ],
    )
    def test_mapping(self, code, status):
        assert status_from_code(code) == status


class TestDecodeWebhook:
    def test_paid_payload(self):
        body = {"code": "00", "data": {"orderCode": 42, "code": "00", "amount": 300000, "reference": "FT123"}}
        info = decode_webhook(json.dumps(body).encode())
        assert info.order_code == 42
        assert info.status == "paid"
        assert info.amount == 300000
        assert info.transaction_id == "FT123"

    def test_unknown_code_stays_pending(self):
        info = decode_webhook(json.dumps({"data": {"orderCode": 42, "code": "77"}}).encode())
        assert info.status == "pending"

    @pytest.mark.parametrize("payload", [b"not json", b"{}", b'{"data": {"orderCode": "abc"}}'])
    def test_malformed(self, payload):
        with pytest.raises(DomainError):
            decode_webhook(payload)


class TestFakeGateway:
    def test_records_calls(self):
        gateway = FakeGateway()
        link = gateway.create_payment_link(7, 1000.0, "ORD-7", [LinkItem("Tee", 1, 1000)], EXPIRES)
        assert link.order_code == 7
        assert gateway.calls[0]["method"] == "create_payment_link"

    def test_configured_failure(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Bank offline")
        with pytest.raises(PaymentGatewayError):
            gateway.create_payment_link(7, 1000.0, "ORD-7", [], EXPIRES)
        assert gateway.get_payment_info(7).status == "failed"

    def test_signature(self):
        assert FakeGateway().verify_webhook_signature(b"{}", TEST_SIGNATURE)
        assert not FakeGateway().verify_webhook_signature(b"{}", "forged")


class TestCashOnDelivery:
    def test_link_has_reference_only(self):
        link = CashOnDeliveryGateway().create_payment_link(9, 1000.0, "ORD-9", [], EXPIRES)
        assert link.reference == "COD-9"
        assert link.checkout_url is None

    def test_stays_pending(self):
        assert CashOnDeliveryGateway().get_payment_info(9).status == "pending"

    def test_never_accepts_webhooks(self):
        assert not CashOnDeliveryGateway().verify_webhook_signature(b"{}", "anything")


class TestPayOSGateway:
    def _gateway(self, body=None, error=None):
        response = MagicMock()
        response.json.return_value = body or {}
        session = MagicMock()
        if error:
            session.request.side_effect = error
        else:
            session.request.return_value = response
        gateway = PayOSGateway(
            "client", "api-key", "checksum", return_url="https://r", cancel_url="https://c", session=session
        )
        return gateway, session

    def test_create_link_signs_request(self):
        gateway, session = self._gateway(
            {"code": "00", "data": {"orderCode": 5, "checkoutUrl": "https://pay.payos.vn/5", "qrCode": "QR"}}
        )
        link = gateway.create_payment_link(5, 300000.4, "ORD-5", [LinkItem("Tee", 3, 100000)], EXPIRES)

        assert link.checkout_url == "https://pay.payos.vn/5"
        payload = session.request.call_args.kwargs["json"]
        assert payload["amount"] == 300000
        assert payload["signature"] == payment_request_signature(
            "checksum", 300000, "https://c", "ORD-5", 5, "https://r"
        )
        headers = session.request.call_args.kwargs["headers"]
        assert headers["x-client-id"] == "client"

    def test_api_error_code(self):
        gateway, _ = self._gateway({"code": "20", "desc": "Invalid order code"})
        with pytest.raises(PaymentGatewayError):
            gateway.get_payment_info(5)

    def test_network_error(self):
        gateway, _ = self._gateway(error=requests.ConnectionError("boom"))
        with pytest.raises(PaymentGatewayError):
            gateway.cancel_payment(5, "reason")

    def test_webhook_signature(self):
        gateway, _ = self._gateway()
        body = b'{"data": {"orderCode": 5}}'
        assert gateway.verify_webhook_signature(body, sign("checksum", body))
        assert not gateway.verify_webhook_signature(body, "deadbeef")
        assert not gateway.verify_webhook_signature(body, "")
