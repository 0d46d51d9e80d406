"""
Single-document write helpers with document-store result semantics.

``update_one`` targets the first row matching the criteria and reports how
many rows matched and how many actually changed; a row whose columns
already hold the new values counts as matched but not modified.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.common import DeleteResult, UpdateResult


async def update_one(
    db: AsyncSession,
    model: Any,
    criteria: list[Any],
    values: dict[str, Any],
) -> UpdateResult:
    target = await db.scalar(
        select(model.id).where(*criteria).order_by(model.id).limit(1)
    )
    if target is None:
        return UpdateResult(matchedCount=0, modifiedCount=0)

    changed = or_(*(getattr(model, field).is_distinct_from(v) for field, v in values.items()))
    result = await db.execute(
        update(model)
        .where(model.id == target, changed)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return UpdateResult(matchedCount=1, modifiedCount=result.rowcount)


async def delete_one(db: AsyncSession, model: Any, criteria: list[Any]) -> DeleteResult:
    target = await db.scalar(
        select(model.id).where(*criteria).order_by(model.id).limit(1)
    )
    if target is None:
        return DeleteResult(deletedCount=0)
    result = await db.execute(
        delete(model)
        .where(model.id == target)
        .execution_options(synchronize_session=False)
    )
    return DeleteResult(deletedCount=result.rowcount)
