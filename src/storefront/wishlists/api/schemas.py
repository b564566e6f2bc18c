"""Pydantic request schemas for wishlists."""

from pydantic import BaseModel, Field


class CreateWishlistRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    is_public: bool = False


class UpdateWishlistRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_public: bool | None = None


class AddWishlistItemRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    notes: str | None = None
    priority: int = Field(default=0, ge=0, le=2)
