"""
User model — accounts created on first sign-in, role-based access control.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Integer, String

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    # Business key; uniqueness is checked on sign-in, not by a constraint
    email: str = Column(String(320), nullable=False, index=True)  # type: ignore[assignment]
    role: str | None = Column(String(20), nullable=True, default="user")  # type: ignore[assignment]
    # user | admin | rider
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    profile: dict = Column(JSON, nullable=False, default=dict)  # type: ignore[assignment]

    def to_document(self) -> dict[str, Any]:
        return {
            **(self.profile or {}),
            "_id": self.id,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }
