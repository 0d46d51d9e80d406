"""
Parcel & Payment models — shipment records and their captured payments.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String

from app.db.base import Base


class Parcel(Base):
    __tablename__ = "parcels"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    payment_status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="unpaid", index=True
    )  # unpaid | paid
    delivery_status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="pending", index=True
    )  # pending | in_transit | delivered
    assigned_rider: str | None = Column(String(320), nullable=True)  # type: ignore[assignment]
    assigned_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(  # type: ignore[assignment]
        DateTime(timezone=True), nullable=True, index=True
    )
    details: dict = Column(JSON, nullable=False, default=dict)  # type: ignore[assignment]

    def to_document(self) -> dict[str, Any]:
        return {
            **(self.details or {}),
            "_id": self.id,
            "payment_status": self.payment_status,
            "delivery_status": self.delivery_status,
            "assigned_rider": self.assigned_rider,
            "assigned_at": self.assigned_at,
            "createdAt": self.created_at,
        }


class Payment(Base):
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    # Plain reference: payment history outlives a deleted parcel
    parcel_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False, index=True)  # type: ignore[assignment]
    amount: float = Column(Float, nullable=False)  # type: ignore[assignment]
    payment_method: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    transaction_id: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    paid_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    paid_at_string: str = Column(String(40), nullable=False)  # type: ignore[assignment]

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "parcelId": self.parcel_id,
            "email": self.email,
            "amount": self.amount,
            "paymentMethod": self.payment_method,
            "transactionId": self.transaction_id,
            "paid_at": self.paid_at,
            "paid_at_string": self.paid_at_string,
        }
