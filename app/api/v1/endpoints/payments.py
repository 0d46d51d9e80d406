"""
Payment endpoints — payment intents, payment capture and payment history.

Capturing a payment flips the parcel to ``paid`` first; the payment record
is only written when that flip actually changed the parcel, so a parcel is
never charged on record twice.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import VerifiedIdentity, get_db, get_verified_identity
from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.operations import update_one
from app.models.parcel import Parcel, Payment
from app.schemas.parcel import (PaymentCreate, PaymentIntentRequest,
                                PaymentIntentResponse, PaymentRecorded)
from app.services.payment_gateway import StripePaymentGateway, get_payment_gateway

router = APIRouter(tags=["payments"])
logger = logging.getLogger(__name__)


@router.get("/payments")
async def list_payments(
    email: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    identity: VerifiedIdentity = Depends(get_verified_identity),
) -> list[dict]:
    """Payment history of the signed-in user, latest first."""
    if identity.email != email:
        raise HTTPException(status_code=403, detail="forbidden access")

    result = await db.execute(
        select(Payment)
        .where(Payment.email == email)
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
    )
    return [p.to_document() for p in result.scalars().all()]


@router.post("/payments", response_model=PaymentRecorded, status_code=201)
async def record_payment(
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> PaymentRecorded:
    gate = await update_one(
        db, Parcel, [Parcel.id == body.parcelId], {"payment_status": "paid"}
    )
    if gate.modifiedCount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Parcel not found or already paid")

    paid_at = datetime.now(timezone.utc)
    payment = Payment(
        parcel_id=body.parcelId,
        email=body.email,
        amount=body.amount,
        payment_method=body.paymentMethod,
        transaction_id=body.transactionId,
        paid_at=paid_at,
        paid_at_string=paid_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    )
    db.add(payment)
    await db.commit()

    logger.info(
        "Payment %s recorded for parcel %s (%s, %.2f)",
        payment.id,
        body.parcelId,
        body.email,
        body.amount,
    )
    return PaymentRecorded(insertedId=payment.id)


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
@limiter.limit(lambda: settings.PAYMENT_INTENT_RATE_LIMIT)
async def create_payment_intent(
    request: Request,
    body: PaymentIntentRequest,
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
) -> PaymentIntentResponse:
    client_secret = await gateway.create_payment_intent(body.amountInCents)
    return PaymentIntentResponse(clientSecret=client_secret)
