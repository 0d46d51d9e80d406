"""Result shapes shared by every collection's write endpoints."""

from __future__ import annotations

from pydantic import BaseModel

# Primary and reference columns are 32-bit INTEGER
MAX_ID = 2**31 - 1


class InsertResult(BaseModel):
    insertedId: int


class UpdateResult(BaseModel):
    matchedCount: int
    modifiedCount: int


class DeleteResult(BaseModel):
    deletedCount: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
