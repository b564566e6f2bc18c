"""Pydantic request schemas for the Catalogue API."""

from pydantic import BaseModel, Field


class CreateProductRequest(BaseModel):
    sku: str
    name: str
    price: float = Field(ge=0)
    description: str | None = None
    category_id: str | None = None
    slug: str | None = None


class UpdateProductRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    category_id: str | None = None
    slug: str | None = None
    price: float | None = Field(default=None, ge=0)


class ChangeStatusRequest(BaseModel):
    action: str


class AddVariantRequest(BaseModel):
    sku: str
    price: float = Field(ge=0)
    name: str | None = None
    attributes: dict | None = None


class UpdateVariantRequest(BaseModel):
    name: str | None = None
    price: float | None = Field(default=None, ge=0)
    is_active: bool | None = None


class CreateCategoryRequest(BaseModel):
    name: str
    description: str | None = None
    parent_id: str | None = None
    display_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    display_order: int | None = None
    is_active: bool | None = None
