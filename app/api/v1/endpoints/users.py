"""
User directory endpoints — sign-in registration, search and role management.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.db.operations import update_one
from app.models.user import User
from app.schemas.common import MAX_ID, InsertResult, UpdateResult
from app.schemas.user import (RoleResponse, UserCreate, UserExistsResponse,
                              UserRoleUpdate, UserSummary)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _like_fragment(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@router.get("/search", response_model=list[UserSummary])
async def search_users(
    email: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> list[User]:
    """Case-insensitive partial match on email, at most ten results."""
    if not email:
        raise HTTPException(status_code=400, detail="Email query is required")

    result = await db.execute(
        select(User)
        .where(User.email.ilike(_like_fragment(email), escape="\\"))
        .order_by(User.id)
        .limit(SEARCH_LIMIT)
    )
    return list(result.scalars().all())


@router.get("/{email}/role", response_model=RoleResponse)
async def get_user_role(email: str, db: AsyncSession = Depends(get_db)) -> RoleResponse:
    user = await db.scalar(
        select(User).where(User.email == email).order_by(User.id).limit(1)
    )
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return RoleResponse(role=user.role or "user")


@router.post("", response_model=InsertResult | UserExistsResponse)
async def upsert_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> InsertResult | UserExistsResponse:
    """Register a user on first sign-in; repeated sign-ins leave the record alone."""
    existing = await db.scalar(select(User.id).where(User.email == body.email).limit(1))
    if existing is not None:
        return UserExistsResponse()

    user = User(
        email=body.email,
        role="user",
        created_at=datetime.now(timezone.utc),
        profile=body.profile(),
    )
    db.add(user)
    await db.commit()
    logger.info("User registered: %s", user.email)
    return InsertResult(insertedId=user.id)


@router.patch("/{user_id}/role", response_model=UpdateResult)
async def set_user_role(
    body: UserRoleUpdate,
    user_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
) -> UpdateResult:
    result = await update_one(db, User, [User.id == user_id], {"role": body.role})
    await db.commit()
    if result.modifiedCount:
        logger.info("User %s role set to %s", user_id, body.role)
    return result
