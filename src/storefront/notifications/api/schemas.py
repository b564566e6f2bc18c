"""Pydantic request schemas for notifications."""

from typing import Any

from pydantic import BaseModel, Field


class SendNotificationRequest(BaseModel):
    user_id: str
    notification_type: str = "general"
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    channel: str = "in_app"
    priority: str = "normal"
    email: str | None = None
    action_url: str | None = None
    data: dict[str, Any] | None = None
