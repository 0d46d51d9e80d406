"""
Tracking log — append-only delivery history, keyed by the public tracking id.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, Index, Integer, String

from app.db.base import Base


class TrackingLog(Base):
    __tablename__ = "tracking"
    __table_args__ = (Index("ix_tracking_tracking_id_time", "tracking_id", "time"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    tracking_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    parcel_id: int | None = Column(Integer, nullable=True, index=True)  # type: ignore[assignment]
    status: str | None = Column(String(40), nullable=True)  # type: ignore[assignment]
    message: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    time: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_by: str = Column(String(320), nullable=False, default="")  # type: ignore[assignment]

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "tracking_id": self.tracking_id,
            "parcel_id": self.parcel_id,
            "status": self.status,
            "message": self.message,
            "time": self.time,
            "updated_by": self.updated_by,
        }
