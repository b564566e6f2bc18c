"""Coupon aggregate: a code-identified discount rule.

Discount:
    percentage     order_amount * value / 100
    fixed          value
    free_shipping  the shipping fee

The result is capped by ``maximum_discount_amount`` (when set) and by the
order amount.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.promotions.coupon.events import CouponCreated, CouponStatusChanged

_CODE_PATTERN = re.compile(r"^[A-Z0-9_-]{3,50}$")


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


class CouponStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


@storefront.aggregate
class Coupon:
    code: String(required=True, max_length=50)
    name: String(required=True, max_length=255)
    description: Text()
    coupon_type: String(required=True, choices=CouponType)
    discount_value: Float(required=True)
    minimum_order_amount: Float(default=0.0, min_value=0.0)
    maximum_discount_amount: Float(default=0.0, min_value=0.0)
    valid_from: DateTime(required=True)
    valid_to: DateTime(required=True)
    usage_limit: Integer(default=0, min_value=0)  # 0 = unlimited
    usage_count: Integer(default=0, min_value=0)
    per_user_limit: Integer(default=1, min_value=1)
    is_stackable: Boolean(default=False)
    first_time_only: Boolean(default=False)
    new_user_only: Boolean(default=False)
    status: String(choices=CouponStatus, default=CouponStatus.ACTIVE.value)
    created_by: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def code_must_be_well_formed(self):
        if not _CODE_PATTERN.match(self.code or ""):
            raise ValidationError({"code": ["Code must be 3-50 upper-case letters, digits, '-' or '_'"]})

    @invariant.post
    def name_must_be_meaningful(self):
        if len((self.name or "").strip()) < 3:
            raise ValidationError({"name": ["Name must be 3-255 characters"]})

    @invariant.post
    def discount_must_be_in_range(self):
        if self.discount_value is None or self.discount_value <= 0:
            raise ValidationError({"discount_value": ["Discount must be greater than zero"]})
        if self.coupon_type == CouponType.PERCENTAGE.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.valid_from and self.valid_to and self.valid_to <= self.valid_from:
            raise ValidationError({"valid_to": ["valid_to must be after valid_from"]})

    @classmethod
    def create(cls, code, name, coupon_type, discount_value, valid_from, valid_to, created_by=None, **options):
        now = datetime.now(UTC)
        coupon = cls(
            code=normalize_code(code),
            name=name,
            coupon_type=CouponType(coupon_type).value,
            discount_value=discount_value,
            valid_from=valid_from,
            valid_to=valid_to,
            created_by=created_by,
            status=CouponStatus.ACTIVE.value,
            usage_count=0,
            created_at=now,
            updated_at=now,
            **{key: value for key, value in options.items() if value is not None},
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                coupon_type=coupon.coupon_type,
                discount_value=discount_value,
                created_by=created_by,
                created_at=now,
            )
        )
        return coupon

    def update(self, **changes):
        for key, value in changes.items():
            if value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    def set_status(self, status):
        target = CouponStatus(status)
        if self.status == target.value:
            return
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(CouponStatusChanged(coupon_id=str(self.id), code=self.code, status=target.value, changed_at=now))

    # -------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------
    def is_valid_at(self, moment: datetime) -> bool:
        """Active, inside its window and under the global usage limit."""
        return (
            self.status == CouponStatus.ACTIVE.value
            and _aware(self.valid_from) <= moment < _aware(self.valid_to)
            and (self.usage_limit == 0 or self.usage_count < self.usage_limit)
        )

    def calculate_discount(self, order_amount: float, shipping_fee: float = 0.0) -> float:
        kind = CouponType(self.coupon_type)
        if kind == CouponType.PERCENTAGE:
            discount = order_amount * self.discount_value / 100
        elif kind == CouponType.FIXED:
            discount = self.discount_value
        else:
            discount = shipping_fee

        if self.maximum_discount_amount and discount > self.maximum_discount_amount:
            discount = self.maximum_discount_amount
        return round(max(0.0, min(discount, order_amount)), 2)

    def record_use(self):
        self.usage_count += 1
        self.updated_at = datetime.now(UTC)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)
