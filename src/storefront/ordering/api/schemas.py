"""Pydantic request schemas for the Ordering API."""

from pydantic import BaseModel, Field


class OrderLine(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)


class CreateOrderRequest(BaseModel):
    items: list[OrderLine] = Field(min_length=1)
    payment_method: str = "cod"
    shipping_address: str | None = None
    billing_address: str | None = None
    notes: str | None = None
    coupon_code: str | None = None
    shipping_provider: str | None = None
    points_to_redeem: int = Field(default=0, ge=0)


class CreateOrderForUserRequest(BaseModel):
    items: list[OrderLine] = Field(min_length=1)
    payment_method: str = "cod"
    shipping_address: str | None = None
    billing_address: str | None = None
    notes: str | None = None
    coupon_code: str | None = None
    shipping_provider: str | None = None


class ShipOrderRequest(BaseModel):
    tracking_number: str = Field(min_length=1, max_length=255)


class CancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)
