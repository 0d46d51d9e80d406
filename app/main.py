"""
Parcel Server — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `models/`, `services/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import select

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.rate_limit import limiter
from app.db.base import Base
from app.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from app.models.parcel import Parcel, Payment  # noqa: F401
from app.models.rider import Rider  # noqa: F401
from app.models.tracking import TrackingLog  # noqa: F401
from app.models.user import User

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed the first admin account when configured
    if settings.FIRST_ADMIN_EMAIL:
        async with async_session_factory() as session:
            user = await session.scalar(
                select(User).where(User.email == settings.FIRST_ADMIN_EMAIL).limit(1)
            )
            if user is None:
                session.add(
                    User(
                        email=settings.FIRST_ADMIN_EMAIL,
                        role="admin",
                        created_at=datetime.now(timezone.utc),
                        profile={},
                    )
                )
                await session.commit()
                logger.info("Default admin created: %s", settings.FIRST_ADMIN_EMAIL)

    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Parcel delivery marketplace backend",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting (slowapi looks the limiter up on app.state)
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    @application.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return "Parcel Server is running"

    return application


app = create_app()
