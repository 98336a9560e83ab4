"""Pydantic DTOs for users and role management."""

from datetime import datetime

from pydantic import BaseModel, Field

from lablend.domain.entities import UserRole


class UserCreate(BaseModel):
    identity: str = Field(..., min_length=1, max_length=255, examples=["alice"])


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserActiveUpdate(BaseModel):
    is_active: bool


class UserResponse(BaseModel):
    id: str
    identity: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
