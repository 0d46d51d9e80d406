"""
Global exception handlers — every failure leaves as ``{"message", "success"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from app.services.payment_gateway import PaymentGatewayError

logger = logging.getLogger(__name__)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


def _describe(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": "; ".join(_describe(e) for e in exc.errors()),
            "success": False,
        },
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"message": f"Rate limit exceeded: {exc.detail}", "success": False},
    )


async def _payment_gateway_error_handler(
    _request: Request, exc: PaymentGatewayError
) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "success": False})


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PaymentGatewayError, _payment_gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
