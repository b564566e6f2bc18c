"""Pydantic request schemas for the address book."""

from pydantic import BaseModel, Field


class CreateAddressRequest(BaseModel):
    address_type: str = "home"
    is_default: bool = False
    full_name: str = Field(min_length=2, max_length=255)
    phone: str = Field(min_length=10, max_length=20)
    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address_line1: str = Field(min_length=5, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    ward: str = Field(min_length=2, max_length=100)
    district: str = Field(min_length=2, max_length=100)
    city: str = Field(min_length=2, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    instructions: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=1000)


class UpdateAddressRequest(BaseModel):
    address_type: str | None = None
    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    phone: str | None = Field(default=None, min_length=10, max_length=20)
    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address_line1: str | None = Field(default=None, min_length=5, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    ward: str | None = Field(default=None, min_length=2, max_length=100)
    district: str | None = Field(default=None, min_length=2, max_length=100)
    city: str | None = Field(default=None, min_length=2, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    instructions: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=1000)
