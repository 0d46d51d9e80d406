"""
Tracking endpoints — append delivery events and read a parcel's history.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db
from app.models.tracking import TrackingLog
from app.schemas.tracking import TrackingCreate, TrackingCreated

router = APIRouter(prefix="/tracking", tags=["tracking"])


@router.post("", response_model=TrackingCreated)
async def add_tracking_log(
    body: TrackingCreate,
    db: AsyncSession = Depends(get_db),
) -> TrackingCreated:
    log = TrackingLog(
        tracking_id=body.tracking_id,
        parcel_id=body.parcel_id,
        status=body.status,
        message=body.message,
        updated_by=body.updated_by,
    )
    db.add(log)
    await db.commit()
    return TrackingCreated(insertedId=log.id)


@router.get("/{tracking_id}")
async def list_tracking_logs(
    tracking_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[dict]:
    """Every event logged under a tracking id, oldest first."""
    result = await db.execute(
        select(TrackingLog)
        .where(TrackingLog.tracking_id == tracking_id)
        .order_by(TrackingLog.time, TrackingLog.id)
    )
    return [log.to_document() for log in result.scalars().all()]
