"""
FastAPI dependencies — database session and the access-control gates.

Gates stack per route: ``get_verified_identity`` alone, or
``require_admin`` (which runs the identity gate first).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any, Optional

from fastapi import Depends, Header, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import (IdentityVerifier, InvalidCredentialError,
                               get_identity_verifier)
from app.db.session import async_session_factory
from app.models.user import User

logger = logging.getLogger(__name__)


class VerifiedIdentity(BaseModel):
    email: str
    uid: str | None = None
    claims: dict[str, Any] = {}


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_verified_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedIdentity:
    """Check ``Authorization: Bearer <token>`` against the identity provider."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized access",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not authorization:
        raise unauthorized

    parts = authorization.split(" ")
    token = parts[1] if len(parts) > 1 else None
    if not token:
        raise unauthorized

    try:
        claims = await verifier.verify(token)
    except InvalidCredentialError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="forbidden access"
        ) from exc

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden access")
    return VerifiedIdentity(
        email=email,
        uid=claims.get("uid") or claims.get("sub"),
        claims=claims,
    )


async def require_admin(
    identity: VerifiedIdentity = Depends(get_verified_identity),
    db: AsyncSession = Depends(get_db),
) -> VerifiedIdentity:
    """Only allow callers whose stored user role is admin."""
    user = await db.scalar(
        select(User).where(User.email == identity.email).order_by(User.id).limit(1)
    )
    if user is None or user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden Access",
        )
    return identity
