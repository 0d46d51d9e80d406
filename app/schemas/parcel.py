"""Pydantic schemas for parcels, rider assignment and payments."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import MAX_ID

# Columns owned by the server; never taken from a create payload's extras
_RESERVED = {"_id", "payment_status", "assigned_rider", "assigned_at"}


# ── Parcel ──────────────────────────────────────────────────────────
class ParcelCreate(BaseModel):
    """Everything besides the lifecycle fields is stored as sent."""

    delivery_status: str = "pending"
    createdAt: datetime | None = None

    model_config = {"extra": "allow"}

    def details(self) -> dict:
        return {k: v for k, v in (self.model_extra or {}).items() if k not in _RESERVED}


class AssignRiderRequest(BaseModel):
    parcelId: int = Field(ge=1, le=MAX_ID)
    riderEmail: str
    assignedAt: datetime | None = None

    @field_validator("riderEmail")
    @classmethod
    def _rider_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("parcelId and riderEmail are required")
        return v


class AssignRiderResponse(BaseModel):
    success: bool = True
    message: str = "Rider assigned and statuses updated"
    parcelModified: int
    riderModified: int


# ── Payment ─────────────────────────────────────────────────────────
class PaymentCreate(BaseModel):
    parcelId: int = Field(ge=1, le=MAX_ID)
    email: str
    amount: float = Field(ge=0)
    paymentMethod: str | None = None
    transactionId: str | None = None


class PaymentRecorded(BaseModel):
    message: str = "Payment recorded and parcel marked as paid"
    insertedId: int


class PaymentIntentRequest(BaseModel):
    amountInCents: int = Field(gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str
