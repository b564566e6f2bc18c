"""Shipping fee quotes.

``calculate_shipping`` prices a parcel against every active provider.
``shipping_fee_for`` is what order placement calls: it picks the requested
provider, else the default provider, else the cheapest quote, and falls back to
the configured flat fee when no rate table covers the parcel.
"""

import json
from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront import config
from storefront.shared.errors import BusinessRuleViolation
from storefront.shipping.provider.management import provider_by_code
from storefront.shipping.provider.provider import ShippingProvider
from storefront.utils.logging import logger


@dataclass
class ShippingQuote:
    provider_id: str
    provider_code: str
    provider_name: str
    rate_id: str
    shipping_fee: float
    cod_fee: float
    insurance_fee: float
    total_fee: float
    min_days: int
    max_days: int
    is_default: bool = False


@dataclass
class ShippingCharge:
    """The fee an order pays and who carries it. ``provider_code`` is None for the flat fallback fee."""

    fee: float
    provider_code: str | None = None


def destination_zone(shipping_address: str | None) -> str | None:
    """City, else province, from a JSON shipping address. Free-text addresses have no zone."""
    if not shipping_address:
        return None
    try:
        address = json.loads(shipping_address)
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(address, dict):
        return None
    return address.get("city") or address.get("province") or address.get("state")


def quote(
    provider: ShippingProvider,
    zone: str | None,
    value: float,
    weight: float = 0.0,
    cod: bool = False,
    insurance: bool = False,
) -> ShippingQuote | None:
    if not provider.accepts(value, cod=cod, insurance=insurance):
        return None
    rate = provider.best_rate(zone or "", weight, value)
    if rate is None:
        return None

    shipping_fee = rate.shipping_fee(weight, value)
    cod_fee = rate.cod_fee if cod else 0.0
    insurance_fee = rate.insurance_fee if insurance else 0.0
    return ShippingQuote(
        provider_id=str(provider.id),
        provider_code=provider.code,
        provider_name=provider.display_name,
        rate_id=str(rate.id),
        shipping_fee=shipping_fee,
        cod_fee=cod_fee,
        insurance_fee=insurance_fee,
        total_fee=round(shipping_fee + cod_fee + insurance_fee, 2),
        min_days=rate.min_days,
        max_days=rate.max_days,
        is_default=bool(provider.is_default),
    )


def active_providers() -> list[ShippingProvider]:
    query = current_domain.repository_for(ShippingProvider)._dao.query.filter(is_active=True).order_by("-priority")
    return list(query.all().items)


def calculate_shipping(
    zone: str | None,
    value: float,
    weight: float = 0.0,
    cod: bool = False,
    insurance: bool = False,
) -> list[ShippingQuote]:
    """Quotes from every active provider that can carry the parcel, cheapest first."""
    quotes = []
    for provider in active_providers():
        result = quote(provider, zone, value, weight, cod=cod, insurance=insurance)
        if result is not None:
            quotes.append(result)
    return sorted(quotes, key=lambda q: q.total_fee)


def shipping_fee_for(
    shipping_address: str | None,
    order_value: float,
    payment_method: str | None = None,
    provider_code: str | None = None,
) -> ShippingCharge:
    zone = destination_zone(shipping_address)
    cod = payment_method == "cod"

    if provider_code:
        provider = provider_by_code(provider_code)
        result = quote(provider, zone, order_value, cod=cod)
        if result is None:
            raise BusinessRuleViolation(
                f"Shipping provider '{provider.code}' cannot deliver this order",
                field="shipping_provider",
            )
        return ShippingCharge(fee=result.total_fee, provider_code=result.provider_code)

    quotes = calculate_shipping(zone, order_value, cod=cod)
    if not quotes:
        logger.debug("No shipping rate covers the order, using flat fee", zone=zone, value=order_value)
        return ShippingCharge(fee=config.DEFAULT_SHIPPING_FEE)

    chosen = next((q for q in quotes if q.is_default), quotes[0])
    return ShippingCharge(fee=chosen.total_fee, provider_code=chosen.provider_code)
