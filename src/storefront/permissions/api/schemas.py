"""Pydantic request schemas for permissions, access roles and user overrides."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreatePermissionRequest(BaseModel):
    resource: str = Field(min_length=1, max_length=50)
    action: str = Field(min_length=1, max_length=20)
    display_name: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None


class UpdatePermissionRequest(BaseModel):
    display_name: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None
    is_active: bool | None = None


class CreateRoleRequest(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    display_name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = None


class UpdateRoleRequest(BaseModel):
    display_name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = None
    is_active: bool | None = None


class RolePermissionRequest(BaseModel):
    permission_id: str


class RolePermissionsRequest(BaseModel):
    permission_ids: list[str]


class UserPermissionRequest(BaseModel):
    permission_id: str
    is_granted: bool = True
    reason: str | None = None
    expires_at: datetime | None = None


class PermissionCheckRequest(BaseModel):
    user_id: str
    role: str | None = None
    resource: str = Field(min_length=1, max_length=50)
    action: str = Field(min_length=1, max_length=20)
