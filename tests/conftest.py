"""
Shared test fixtures for the Parcel Server test suite.

Every test gets a fresh in-memory aiosqlite database wired into the app
through the ``get_db`` dependency override.  Identity runs through the real
``jwt`` backend; the payment gateway is replaced with a fake.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["IDENTITY_PROVIDER"] = "jwt"
os.environ["SECRET_KEY"] = "test-secret-key-for-identity-tokens"
os.environ["PAYMENT_INTENT_RATE_LIMIT"] = "1000/minute"
# CORS fix (JSON format)
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.core.security import create_identity_token
from app.db.base import Base
from app.main import app
from app.services.payment_gateway import PaymentGatewayError, get_payment_gateway


class FakePaymentGateway:
    """Stands in for Stripe; remembers every requested amount."""

    def __init__(self) -> None:
        self.amounts: list[int] = []
        self.error: str | None = None

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        if self.error:
            raise PaymentGatewayError(self.error)
        self.amounts.append(amount_in_cents)
        return f"pi_test_{amount_in_cents}_secret"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema on a private in-memory database for each test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker,
    payment_gateway: FakePaymentGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Helpers ─────────────────────────────────────────────────────────
@pytest.fixture
def auth_headers():
    """Factory: ``auth_headers(email)`` → headers carrying a valid bearer token."""

    def _make(email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_identity_token(email)}"}

    return _make


@pytest.fixture
def seed(db_session: AsyncSession):
    """Factory: insert rows and return them with their ids populated."""

    async def _seed(*rows):
        db_session.add_all(rows)
        await db_session.commit()
        return rows[0] if len(rows) == 1 else rows

    return _seed


@pytest.fixture
def reload(db_session: AsyncSession):
    """Factory: fetch a row fresh from the database, bypassing the identity map."""

    async def _reload(model, row_id: int):
        result = await db_session.execute(
            select(model).where(model.id == row_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    return _reload
