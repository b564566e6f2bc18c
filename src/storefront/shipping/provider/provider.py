"""ShippingProvider aggregate: a carrier and the rate table it charges.

Each ShippingRate covers one destination zone (city or province, ``*`` for
anywhere) and a value band. The fee for a parcel is the base fee, plus the
per-kilogram fee above the band's minimum weight, plus the value fee per
million above the band's minimum value. COD and insurance surcharges are added
when the parcel asks for them; providers that do not offer those are skipped.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.domain import storefront
from storefront.shared.errors import NotFound

ANY_ZONE = "*"

PROVIDER_FIELDS = (
    "display_name",
    "description",
    "website",
    "phone",
    "email",
    "is_active",
    "priority",
    "supports_cod",
    "supports_tracking",
    "supports_insurance",
    "min_value",
    "max_value",
    "webhook_secret",
)

RATE_FIELDS = (
    "to_zone",
    "min_weight",
    "max_weight",
    "min_value",
    "max_value",
    "base_fee",
    "weight_fee",
    "value_fee",
    "cod_fee",
    "insurance_fee",
    "min_days",
    "max_days",
    "is_active",
)


def normalize_zone(zone: str | None) -> str:
    return (zone or ANY_ZONE).strip().lower() or ANY_ZONE


def _within(value: float, low: float, high: float) -> bool:
    """``high`` of zero means the band is open-ended."""
    return value >= (low or 0.0) and (not high or value <= high)


@storefront.entity(part_of="ShippingProvider")
class ShippingRate:
    to_zone = String(required=True, max_length=100, default=ANY_ZONE)
    min_weight = Float(default=0.0, min_value=0.0)
    max_weight = Float(default=0.0, min_value=0.0)
    min_value = Float(default=0.0, min_value=0.0)
    max_value = Float(default=0.0, min_value=0.0)
    base_fee = Float(required=True, min_value=0.0)
    weight_fee = Float(default=0.0, min_value=0.0)
    value_fee = Float(default=0.0, min_value=0.0)
    cod_fee = Float(default=0.0, min_value=0.0)
    insurance_fee = Float(default=0.0, min_value=0.0)
    min_days = Integer(default=1, min_value=0)
    max_days = Integer(default=3, min_value=0)
    is_active = Boolean(default=True)

    def covers(self, zone: str, weight: float, value: float) -> bool:
        return (
            self.is_active
            and self.to_zone in (ANY_ZONE, normalize_zone(zone))
            and _within(weight, self.min_weight, self.max_weight)
            and _within(value, self.min_value, self.max_value)
        )

    def shipping_fee(self, weight: float, value: float) -> float:
        fee = self.base_fee
        if self.weight_fee:
            fee += max(0.0, weight - (self.min_weight or 0.0)) * self.weight_fee
        if self.value_fee:
            fee += max(0.0, value - (self.min_value or 0.0)) * self.value_fee / 1_000_000
        return round(fee, 2)


@storefront.aggregate
class ShippingProvider:
    name = String(required=True, max_length=100)
    code = String(required=True, max_length=50)
    display_name = String(required=True, max_length=255)
    description = Text()
    website = String(max_length=500)
    phone = String(max_length=20)
    email = String(max_length=255)
    is_active = Boolean(default=True)
    is_default = Boolean(default=False)
    priority = Integer(default=0)
    supports_cod = Boolean(default=False)
    supports_tracking = Boolean(default=False)
    supports_insurance = Boolean(default=False)
    min_value = Float(default=0.0, min_value=0.0)
    max_value = Float(default=0.0, min_value=0.0)
    webhook_secret = String(max_length=255)
    rates = HasMany(ShippingRate)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def code_must_be_a_slug(self):
        if self.code and not self.code.replace("_", "").replace("-", "").isalnum():
            raise ValidationError({"code": ["Code may only contain letters, digits, '-' and '_'"]})

    @invariant.post
    def rates_must_have_ordered_bands(self):
        for rate in self.rates:
            if rate.max_weight and rate.max_weight < rate.min_weight:
                raise ValidationError({"rates": ["Maximum weight must not be below minimum weight"]})
            if rate.max_value and rate.max_value < rate.min_value:
                raise ValidationError({"rates": ["Maximum value must not be below minimum value"]})
            if rate.max_days < rate.min_days:
                raise ValidationError({"rates": ["Maximum days must not be below minimum days"]})

    @classmethod
    def create(cls, name, code, display_name=None, **options):
        now = datetime.now(UTC)
        return cls(
            name=name,
            code=code.strip().lower(),
            display_name=display_name or name,
            created_at=now,
            updated_at=now,
            **{key: value for key, value in options.items() if value is not None},
        )

    def update(self, **changes):
        for key, value in changes.items():
            if value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Rates
    # -------------------------------------------------------------------
    def find_rate(self, rate_id) -> ShippingRate:
        for rate in self.rates:
            if str(rate.id) == str(rate_id):
                return rate
        raise NotFound(f"Shipping rate {rate_id} not found", field="rate_id")

    def add_rate(self, **values) -> ShippingRate:
        values["to_zone"] = normalize_zone(values.get("to_zone"))
        rate = ShippingRate(**{key: value for key, value in values.items() if value is not None})
        self.add_rates(rate)
        self.updated_at = datetime.now(UTC)
        return rate

    def update_rate(self, rate_id, **changes) -> ShippingRate:
        rate = self.find_rate(rate_id)
        if changes.get("to_zone") is not None:
            changes["to_zone"] = normalize_zone(changes["to_zone"])
        for key, value in changes.items():
            if value is not None:
                setattr(rate, key, value)
        self.updated_at = datetime.now(UTC)
        return rate

    def remove_rate(self, rate_id) -> None:
        self.remove_rates(self.find_rate(rate_id))
        self.updated_at = datetime.now(UTC)

    def accepts(self, value: float, cod: bool = False, insurance: bool = False) -> bool:
        """Whether the provider takes a parcel of this value with these options at all."""
        if not self.is_active or not _within(value, self.min_value, self.max_value):
            return False
        if cod and not self.supports_cod:
            return False
        return not (insurance and not self.supports_insurance)

    def best_rate(self, zone: str, weight: float, value: float) -> ShippingRate | None:
        """Cheapest active rate covering the parcel, preferring a zone match over ``*``."""
        matching = [rate for rate in self.rates if rate.covers(zone, weight, value)]
        if not matching:
            return None
        return min(matching, key=lambda rate: (rate.to_zone == ANY_ZONE, rate.shipping_fee(weight, value)))
