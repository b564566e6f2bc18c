"""Pydantic request schemas for the Inventory API."""

from pydantic import BaseModel, Field


class InitializeStockRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    sku: str | None = None
    initial_quantity: int = Field(ge=0, default=0)
    reorder_point: int = Field(ge=0, default=10)


class StockQuantityRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)
    reference: str | None = None


class UpdateStockSettingsRequest(BaseModel):
    reorder_point: int = Field(ge=0)


class CreateMovementRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    movement_type: str
    quantity: int = Field(ge=0)
    unit_cost: float | None = Field(default=None, ge=0)
    reference: str | None = None
    reference_type: str | None = None
    notes: str | None = None


class UpdateMovementRequest(BaseModel):
    quantity: int | None = Field(default=None, ge=0)
    unit_cost: float | None = Field(default=None, ge=0)
    reference: str | None = None
    reference_type: str | None = None
    notes: str | None = None


class CancelMovementRequest(BaseModel):
    reason: str | None = None
