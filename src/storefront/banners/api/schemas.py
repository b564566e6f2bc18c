"""Pydantic request schemas for banners."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateBannerRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    banner_type: str = "image"
    position: str = "main"
    status: str = "draft"
    image_url: str | None = Field(default=None, max_length=500)
    video_url: str | None = Field(default=None, max_length=500)
    text_content: str | None = None
    button_text: str | None = Field(default=None, max_length=100)
    link_url: str | None = Field(default=None, max_length=500)
    alt_text: str | None = Field(default=None, max_length=255)
    priority: int = 0
    start_date: datetime | None = None
    end_date: datetime | None = None


class UpdateBannerRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    banner_type: str | None = None
    position: str | None = None
    status: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    video_url: str | None = Field(default=None, max_length=500)
    text_content: str | None = None
    button_text: str | None = Field(default=None, max_length=100)
    link_url: str | None = Field(default=None, max_length=500)
    alt_text: str | None = Field(default=None, max_length=255)
    priority: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
