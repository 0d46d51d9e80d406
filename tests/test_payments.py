"""Tests for payment capture, payment history and payment intents."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models.parcel import Parcel, Payment

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _payment(parcel_id: int, **overrides) -> dict:
    body = {
        "parcelId": parcel_id,
        "email": "payer@example.com",
        "amount": 150.0,
        "paymentMethod": "card",
        "transactionId": "pi_123",
    }
    body.update(overrides)
    return body


async def _payments_for(db, parcel_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(Payment).where(Payment.parcel_id == parcel_id)
    )


@pytest.mark.asyncio
async def test_record_payment_marks_parcel_paid(
    async_client: AsyncClient, db_session, seed, reload
):
    parcel = await seed(Parcel(created_at=T0))
    resp = await async_client.post("/payments", json=_payment(parcel.id))
    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "Payment recorded and parcel marked as paid"

    assert (await reload(Parcel, parcel.id)).payment_status == "paid"
    payment = await reload(Payment, data["insertedId"])
    assert payment.parcel_id == parcel.id
    assert payment.transaction_id == "pi_123"
    assert payment.paid_at is not None
    assert payment.paid_at_string.endswith("Z")
    assert await _payments_for(db_session, parcel.id) == 1


@pytest.mark.asyncio
async def test_record_payment_twice_stores_one_payment(
    async_client: AsyncClient, db_session, seed
):
    parcel = await seed(Parcel(created_at=T0))
    first = await async_client.post("/payments", json=_payment(parcel.id))
    assert first.status_code == 201

    second = await async_client.post("/payments", json=_payment(parcel.id, transactionId="pi_456"))
    assert second.status_code == 404
    assert second.json()["message"] == "Parcel not found or already paid"
    assert await _payments_for(db_session, parcel.id) == 1


@pytest.mark.asyncio
async def test_record_payment_for_already_paid_parcel(async_client: AsyncClient, db_session, seed):
    parcel = await seed(Parcel(payment_status="paid", created_at=T0))
    resp = await async_client.post("/payments", json=_payment(parcel.id))
    assert resp.status_code == 404
    assert await _payments_for(db_session, parcel.id) == 0


@pytest.mark.asyncio
async def test_record_payment_for_missing_parcel(async_client: AsyncClient, db_session):
    resp = await async_client.post("/payments", json=_payment(9999))
    assert resp.status_code == 404
    assert await _payments_for(db_session, 9999) == 0


@pytest.mark.asyncio
async def test_record_payment_requires_fields(async_client: AsyncClient):
    resp = await async_client.post("/payments", json={"email": "payer@example.com"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_payment_history_latest_first(async_client: AsyncClient, auth_headers, seed):
    older, newer, _other = await seed(
        Payment(parcel_id=1, email="me@example.com", amount=10, paid_at=T0, paid_at_string="a"),
        Payment(
            parcel_id=2,
            email="me@example.com",
            amount=20,
            paid_at=T0 + timedelta(days=1),
            paid_at_string="b",
        ),
        Payment(parcel_id=3, email="you@example.com", amount=30, paid_at=T0, paid_at_string="c"),
    )
    resp = await async_client.get(
        "/payments", params={"email": "me@example.com"}, headers=auth_headers("me@example.com")
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [p["_id"] for p in data] == [newer.id, older.id]
    assert data[0]["parcelId"] == 2


@pytest.mark.asyncio
async def test_payment_history_of_someone_else_is_forbidden(
    async_client: AsyncClient, auth_headers, seed
):
    await seed(
        Payment(parcel_id=1, email="you@example.com", amount=10, paid_at=T0, paid_at_string="a")
    )
    resp = await async_client.get(
        "/payments", params={"email": "you@example.com"}, headers=auth_headers("me@example.com")
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_payment_history_without_email_is_forbidden(async_client: AsyncClient, auth_headers):
    resp = await async_client.get("/payments", headers=auth_headers("me@example.com"))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_payment_history_requires_token(async_client: AsyncClient):
    resp = await async_client.get("/payments", params={"email": "me@example.com"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_payment_intent(async_client: AsyncClient, payment_gateway):
    resp = await async_client.post("/create-payment-intent", json={"amountInCents": 1999})
    assert resp.status_code == 200
    assert resp.json() == {"clientSecret": "pi_test_1999_secret"}
    assert payment_gateway.amounts == [1999]


@pytest.mark.asyncio
async def test_create_payment_intent_rejects_bad_amount(async_client: AsyncClient):
    resp = await async_client.post("/create-payment-intent", json={"amountInCents": 0})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_payment_intent_gateway_failure(async_client: AsyncClient, payment_gateway):
    payment_gateway.error = "Invalid API Key provided"
    resp = await async_client.post("/create-payment-intent", json={"amountInCents": 500})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Invalid API Key provided"
