"""
Async engine & session factory.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for local runs and
tests, which gets no connection pool tuning.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


def _engine_options(database_url: str) -> dict:
    options: dict = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
