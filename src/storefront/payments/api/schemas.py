"""Pydantic request schemas for the Payments API."""

from pydantic import BaseModel, Field


class CreatePaymentLinkRequest(BaseModel):
    payment_method: str | None = None


class CancelPaymentRequest(BaseModel):
    reason: str = Field(default="Cancelled by customer", max_length=500)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Payment declined"
    payment_status: str = "paid"
