"""Pydantic schemas for the user directory."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

_ASSIGNABLE_ROLES = {"admin", "user"}


class UserCreate(BaseModel):
    """Sign-in payload. Unknown fields (name, photo, ...) are kept on the profile."""

    email: str

    model_config = {"extra": "allow"}

    @field_validator("email")
    @classmethod
    def _strip_email(cls, v: str) -> str:
        return v.strip()

    def profile(self) -> dict:
        # role is never self-assigned
        return {k: v for k, v in (self.model_extra or {}).items() if k not in {"role", "_id"}}


class UserRoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _ASSIGNABLE_ROLES:
            raise ValueError("Invalid role")
        return v


class UserSummary(BaseModel):
    id: int = Field(serialization_alias="_id")
    email: str
    role: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class RoleResponse(BaseModel):
    role: str


class UserExistsResponse(BaseModel):
    message: str = "User already exists"
