"""Pydantic request schemas for coupons and loyalty points."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateCouponRequest(BaseModel):
    code: str = Field(min_length=3, max_length=50)
    name: str = Field(min_length=3, max_length=255)
    description: str | None = None
    coupon_type: str
    discount_value: float = Field(gt=0)
    minimum_order_amount: float = Field(default=0.0, ge=0)
    maximum_discount_amount: float = Field(default=0.0, ge=0)
    valid_from: datetime
    valid_to: datetime
    usage_limit: int = Field(default=0, ge=0)
    per_user_limit: int = Field(default=1, ge=1)
    is_stackable: bool = False
    first_time_only: bool = False
    new_user_only: bool = False


class UpdateCouponRequest(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None
    discount_value: float | None = Field(default=None, gt=0)
    minimum_order_amount: float | None = Field(default=None, ge=0)
    maximum_discount_amount: float | None = Field(default=None, ge=0)
    valid_from: datetime | None = None
    valid_to: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=0)
    per_user_limit: int | None = Field(default=None, ge=1)
    is_stackable: bool | None = None
    first_time_only: bool | None = None
    new_user_only: bool | None = None
    status: str | None = None


class ValidateCouponRequest(BaseModel):
    code: str
    order_amount: float = Field(ge=0)
    shipping_fee: float | None = Field(default=None, ge=0)
    other_coupons: int = Field(default=0, ge=0)


class UseCouponRequest(BaseModel):
    code: str
    order_id: str
    order_amount: float = Field(ge=0)
    shipping_fee: float | None = Field(default=None, ge=0)


class PointsRequest(BaseModel):
    user_id: str | None = None
    points: int = Field(ge=1)
    reference: str | None = None
    description: str | None = None


class AdjustPointsRequest(BaseModel):
    user_id: str
    points: int
    reference: str | None = None
    description: str | None = None
