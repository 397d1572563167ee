"""Pydantic response schemas for the Identity API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    created_at: datetime


class RoleSchema(BaseModel):
    role: str
    can_sell: bool
    is_admin: bool
