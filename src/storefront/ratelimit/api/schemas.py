"""Pydantic request schemas for rate limit rules."""

from pydantic import BaseModel, Field


class CreateRateLimitRuleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    path_prefix: str = Field(min_length=1, max_length=255)
    limit: int = Field(ge=1)
    window_seconds: int = Field(ge=1)
    priority: int = 0
    is_active: bool = True


class UpdateRateLimitRuleRequest(BaseModel):
    description: str | None = None
    path_prefix: str | None = Field(default=None, min_length=1, max_length=255)
    limit: int | None = Field(default=None, ge=1)
    window_seconds: int | None = Field(default=None, ge=1)
    priority: int | None = None
    is_active: bool | None = None
