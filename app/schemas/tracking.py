"""Pydantic schemas for tracking logs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.common import MAX_ID


class TrackingCreate(BaseModel):
    tracking_id: str | None = None
    parcel_id: int | None = Field(default=None, ge=1, le=MAX_ID)
    status: str | None = None
    message: str | None = None
    updated_by: str = ""


class TrackingCreated(BaseModel):
    success: bool = True
    insertedId: int
