"""
Parcel lifecycle endpoints — create, list, fetch, delete and rider assignment.

- GET /parcels requires a verified identity.
- Everything else is open.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import VerifiedIdentity, get_db, get_verified_identity
from app.db.operations import delete_one, update_one
from app.models.parcel import Parcel
from app.models.rider import Rider
from app.schemas.common import MAX_ID, DeleteResult, InsertResult
from app.schemas.parcel import (AssignRiderRequest, AssignRiderResponse,
                                ParcelCreate)

router = APIRouter(prefix="/parcels", tags=["parcels"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_parcels(
    payment_status: str | None = Query(default=None),
    delivery_status: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _identity: VerifiedIdentity = Depends(get_verified_identity),
) -> list[dict]:
    """Parcels matching every given status filter, newest first."""
    query = select(Parcel)
    if payment_status:
        query = query.where(Parcel.payment_status == payment_status)
    if delivery_status:
        query = query.where(Parcel.delivery_status == delivery_status)
    # Undated rows sort after dated ones on every backend
    query = query.order_by(
        Parcel.created_at.is_(None), Parcel.created_at.desc(), Parcel.id.desc()
    )

    result = await db.execute(query)
    return [p.to_document() for p in result.scalars().all()]


@router.post("", response_model=InsertResult, status_code=201)
async def create_parcel(
    body: ParcelCreate,
    db: AsyncSession = Depends(get_db),
) -> InsertResult:
    parcel = Parcel(
        payment_status="unpaid",
        delivery_status=body.delivery_status,
        created_at=body.createdAt or datetime.now(timezone.utc),
        details=body.details(),
    )
    db.add(parcel)
    await db.commit()
    logger.info("Parcel %s created", parcel.id)
    return InsertResult(insertedId=parcel.id)


@router.post("/assign", response_model=AssignRiderResponse)
async def assign_rider(
    body: AssignRiderRequest,
    db: AsyncSession = Depends(get_db),
) -> AssignRiderResponse:
    """Put a parcel in transit with a rider and mark that rider busy.

    Both updates always run and their counts are reported separately; a
    missing parcel does not stop the rider update, nor the reverse.
    """
    parcel_result = await update_one(
        db,
        Parcel,
        [Parcel.id == body.parcelId],
        {
            "delivery_status": "in_transit",
            "assigned_rider": body.riderEmail,
            "assigned_at": body.assignedAt or datetime.now(timezone.utc),
        },
    )
    rider_result = await update_one(
        db,
        Rider,
        [Rider.email == body.riderEmail],
        {"work_status": "in_delivery", "current_parcel": body.parcelId},
    )
    await db.commit()

    logger.info(
        "Parcel %s assigned to %s (parcel modified=%d, rider modified=%d)",
        body.parcelId,
        body.riderEmail,
        parcel_result.modifiedCount,
        rider_result.modifiedCount,
    )
    return AssignRiderResponse(
        parcelModified=parcel_result.modifiedCount,
        riderModified=rider_result.modifiedCount,
    )


@router.get("/{parcel_id}")
async def get_parcel(
    parcel_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
) -> dict:
    parcel = await db.get(Parcel, parcel_id)
    if parcel is None:
        raise HTTPException(status_code=404, detail="Parcel not found")
    return parcel.to_document()


@router.delete("/{parcel_id}", response_model=DeleteResult)
async def delete_parcel(
    parcel_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
) -> DeleteResult:
    result = await delete_one(db, Parcel, [Parcel.id == parcel_id])
    await db.commit()
    if result.deletedCount:
        logger.info("Parcel %s deleted", parcel_id)
    return result
