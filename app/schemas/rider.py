"""Pydantic schemas for rider applications and status changes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

_DECISIONS = {"active", "rejected"}
_RESERVED = {"_id", "status", "work_status", "current_parcel", "updated_at"}


class RiderApplication(BaseModel):
    email: str | None = None
    district: str | None = None
    applied_at: datetime | None = None

    model_config = {"extra": "allow"}

    def details(self) -> dict:
        return {k: v for k, v in (self.model_extra or {}).items() if k not in _RESERVED}


class RiderStatusUpdate(BaseModel):
    status: str


class RiderDecision(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str) -> str:
        if v not in _DECISIONS:
            raise ValueError("Invalid status value")
        return v
