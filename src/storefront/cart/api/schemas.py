"""Pydantic request schemas for the Cart API."""

from pydantic import BaseModel, Field


class UpdateCartRequest(BaseModel):
    shipping_address: str | None = None
    billing_address: str | None = None
    notes: str | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class ConvertCartRequest(BaseModel):
    payment_method: str = "cod"
    shipping_address: str | None = None
    billing_address: str | None = None
    notes: str | None = None
    coupon_code: str | None = None
    shipping_provider: str | None = None
    points_to_redeem: int = Field(default=0, ge=0)
