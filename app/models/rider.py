"""
Rider model — delivery agent applications and their work state.

Lifecycle: ``pending`` → ``active`` | ``rejected`` (admin decision).
Active riders move ``available`` → ``in_delivery`` when a parcel is assigned.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Integer, String

from app.db.base import Base


class Rider(Base):
    __tablename__ = "riders"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str | None = Column(String(320), nullable=True, index=True)  # type: ignore[assignment]
    district: str | None = Column(String(100), nullable=True, index=True)  # type: ignore[assignment]
    status: str | None = Column(  # type: ignore[assignment]
        String(20), nullable=True, default="pending", index=True
    )  # pending | active | rejected
    work_status: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    # available | in_delivery
    current_parcel: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    applied_at: datetime | None = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    details: dict = Column(JSON, nullable=False, default=dict)  # type: ignore[assignment]

    def to_document(self) -> dict[str, Any]:
        return {
            **(self.details or {}),
            "_id": self.id,
            "email": self.email,
            "district": self.district,
            "status": self.status,
            "work_status": self.work_status,
            "current_parcel": self.current_parcel,
            "applied_at": self.applied_at,
            "updated_at": self.updated_at,
        }
