"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations per method:
- CashOnDeliveryGateway for ``cod``
- PayOSGateway for ``vietqr`` when PayOS credentials are configured
- FakeGateway for ``vietqr`` otherwise (development and testing)
"""

from storefront import config
from storefront.payments.gateway.cod_adapter import CashOnDeliveryGateway
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.payos_adapter import PayOSGateway
from storefront.payments.gateway.port import PaymentGateway

_gateways: dict[str, PaymentGateway] = {}


def _default_gateway(method: str) -> PaymentGateway:
    if method == "cod":
        return CashOnDeliveryGateway()
    if config.PAYOS_CLIENT_ID and config.PAYOS_API_KEY and config.PAYOS_CHECKSUM_KEY:
        return PayOSGateway(
            client_id=config.PAYOS_CLIENT_ID,
            api_key=config.PAYOS_API_KEY,
            checksum_key=config.PAYOS_CHECKSUM_KEY,
            base_url=config.PAYOS_BASE_URL,
            return_url=config.PAYOS_RETURN_URL,
            cancel_url=config.PAYOS_CANCEL_URL,
            timeout=config.PAYOS_TIMEOUT_SECONDS,
        )
    return FakeGateway()


def get_gateway(method: str = "vietqr") -> PaymentGateway:
    """Return the gateway serving a payment method, creating the default on first use."""
    if method not in _gateways:
        _gateways[method] = _default_gateway(method)
    return _gateways[method]


def set_gateway(gateway: PaymentGateway, method: str = "vietqr") -> None:
    """Override the gateway for a payment method (useful for tests)."""
    _gateways[method] = gateway


def reset_gateway() -> None:
    """Reset every method to its default gateway."""
    _gateways.clear()
