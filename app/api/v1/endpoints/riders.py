"""
Rider workflow endpoints — applications, admin review and availability.

Review state machine: pending → active | rejected.  Approval to ``active``
also promotes the matching user account to the ``rider`` role.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import VerifiedIdentity, get_db, require_admin
from app.db.operations import delete_one, update_one
from app.models.rider import Rider
from app.models.user import User
from app.schemas.common import (MAX_ID, InsertResult, MessageResponse,
                                UpdateResult)
from app.schemas.rider import RiderApplication, RiderDecision, RiderStatusUpdate

router = APIRouter(prefix="/riders", tags=["riders"])
logger = logging.getLogger(__name__)


@router.post("", response_model=InsertResult)
async def apply_as_rider(
    body: RiderApplication,
    db: AsyncSession = Depends(get_db),
) -> InsertResult:
    rider = Rider(
        email=body.email,
        district=body.district,
        status="pending",
        applied_at=body.applied_at or datetime.now(timezone.utc),
        details=body.details(),
    )
    db.add(rider)
    await db.commit()
    logger.info("Rider application %s received from %s", rider.id, rider.email)
    return InsertResult(insertedId=rider.id)


@router.get("/pending")
async def list_pending_riders(
    db: AsyncSession = Depends(get_db),
    _admin: VerifiedIdentity = Depends(require_admin),
) -> list[dict]:
    """Applications awaiting review, most recent first."""
    result = await db.execute(
        select(Rider)
        .where(Rider.status == "pending")
        .order_by(Rider.applied_at.is_(None), Rider.applied_at.desc(), Rider.id.desc())
    )
    return [r.to_document() for r in result.scalars().all()]


@router.get("/active")
async def list_active_riders(
    db: AsyncSession = Depends(get_db),
    _admin: VerifiedIdentity = Depends(require_admin),
) -> list[dict]:
    result = await db.execute(
        select(Rider).where(Rider.status == "active").order_by(Rider.id)
    )
    return [r.to_document() for r in result.scalars().all()]


@router.get("/available")
async def list_riders_by_district(
    district: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    if not district:
        raise HTTPException(status_code=400, detail="District required")

    result = await db.execute(
        select(Rider).where(Rider.district == district).order_by(Rider.id)
    )
    return [r.to_document() for r in result.scalars().all()]


@router.patch(
    "/status/{rider_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}},
)
async def set_rider_status(
    body: RiderStatusUpdate,
    rider_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
):
    """Generic status write; no transition rules and no role cascade."""
    result = await update_one(
        db,
        Rider,
        [Rider.id == rider_id],
        {"status": body.status, "updated_at": datetime.now(timezone.utc)},
    )
    await db.commit()

    if result.modifiedCount > 0:
        return MessageResponse(message="Status updated")
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Rider not found or already updated"},
    )


@router.patch("/{rider_id}/status", response_model=UpdateResult)
async def review_rider(
    body: RiderDecision,
    rider_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    _admin: VerifiedIdentity = Depends(require_admin),
) -> UpdateResult:
    """Approve (``active``) or reject (``rejected``) a rider application."""
    result = await update_one(db, Rider, [Rider.id == rider_id], {"status": body.status})

    if body.status == "active":
        rider = await db.get(Rider, rider_id)
        if rider is not None:
            if rider.work_status is None:
                rider.work_status = "available"
            if rider.email:
                # Skipped silently when no account has this email
                promoted = await update_one(
                    db, User, [User.email == rider.email], {"role": "rider"}
                )
                logger.info(
                    "Rider %s approved; user role promoted: %s",
                    rider.email,
                    bool(promoted.matchedCount),
                )

    await db.commit()
    return result


@router.delete(
    "/{rider_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}},
)
async def reject_rider(
    rider_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
):
    """Reject an application by removing it."""
    result = await delete_one(db, Rider, [Rider.id == rider_id])
    await db.commit()

    if result.deletedCount > 0:
        logger.info("Rider application %s deleted", rider_id)
        return MessageResponse(message="Rider application rejected and deleted.")
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Rider not found."},
    )
