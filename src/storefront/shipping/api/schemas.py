"""Pydantic request schemas for shipping providers, fee quotes and order tracking."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateShippingProviderRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=50)
    display_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    website: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=255)
    is_active: bool = True
    is_default: bool = False
    priority: int = 0
    supports_cod: bool = False
    supports_tracking: bool = False
    supports_insurance: bool = False
    min_value: float | None = Field(default=None, ge=0)
    max_value: float | None = Field(default=None, ge=0)
    webhook_secret: str | None = Field(default=None, max_length=255)


class UpdateShippingProviderRequest(BaseModel):
    display_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    website: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None
    is_default: bool | None = None
    priority: int | None = None
    supports_cod: bool | None = None
    supports_tracking: bool | None = None
    supports_insurance: bool | None = None
    min_value: float | None = Field(default=None, ge=0)
    max_value: float | None = Field(default=None, ge=0)
    webhook_secret: str | None = Field(default=None, max_length=255)


class ShippingRateRequest(BaseModel):
    to_zone: str | None = Field(default=None, max_length=100)
    min_weight: float | None = Field(default=None, ge=0)
    max_weight: float | None = Field(default=None, ge=0)
    min_value: float | None = Field(default=None, ge=0)
    max_value: float | None = Field(default=None, ge=0)
    base_fee: float = Field(ge=0)
    weight_fee: float | None = Field(default=None, ge=0)
    value_fee: float | None = Field(default=None, ge=0)
    cod_fee: float | None = Field(default=None, ge=0)
    insurance_fee: float | None = Field(default=None, ge=0)
    min_days: int | None = Field(default=None, ge=0)
    max_days: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class UpdateShippingRateRequest(ShippingRateRequest):
    base_fee: float | None = Field(default=None, ge=0)


class CalculateShippingRequest(BaseModel):
    zone: str | None = Field(default=None, max_length=100)
    value: float = Field(ge=0)
    weight: float = Field(default=0.0, ge=0)
    cod: bool = False
    insurance: bool = False


class CreateOrderTrackingRequest(BaseModel):
    order_id: str
    tracking_number: str = Field(min_length=1, max_length=100)
    carrier: str = Field(min_length=1, max_length=100)
    carrier_code: str | None = Field(default=None, max_length=50)
    tracking_url: str | None = Field(default=None, max_length=500)
    estimated_delivery: datetime | None = None
    auto_sync: bool = True
    notify_user: bool = True


class UpdateOrderTrackingRequest(BaseModel):
    carrier: str | None = Field(default=None, max_length=100)
    carrier_code: str | None = Field(default=None, max_length=50)
    tracking_url: str | None = Field(default=None, max_length=500)
    estimated_delivery: datetime | None = None
    location: str | None = Field(default=None, max_length=255)
    description: str | None = None
    auto_sync: bool | None = None
    notify_user: bool | None = None
    is_active: bool | None = None


class AddTrackingEventRequest(BaseModel):
    status: str = Field(min_length=1, max_length=50)
    status_text: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    description: str | None = None
    event_code: str | None = Field(default=None, max_length=50)
    event_time: datetime | None = None
    is_important: bool | None = None


class CarrierWebhookPayload(BaseModel):
    tracking_number: str = Field(min_length=1, max_length=100)
    status: str = Field(min_length=1, max_length=50)
    status_text: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    description: str | None = None
    event_code: str | None = Field(default=None, max_length=50)
    event_time: str | None = Field(default=None, max_length=50)
