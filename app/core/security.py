"""
Identity verification — turns a bearer token into a verified identity.

Two backends:

* ``firebase`` — ID tokens issued by Firebase Authentication, checked with
  the firebase-admin SDK (production).
* ``jwt`` — HS256 tokens signed with ``SECRET_KEY`` (local development and
  tests).  ``create_identity_token`` mints them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials as firebase_credentials
from firebase_admin.exceptions import FirebaseError
from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool

from app.core.config import INSECURE_SECRET_KEY, settings

logger = logging.getLogger(__name__)


class InvalidCredentialError(Exception):
    """Raised when the identity backend rejects a token."""


class IdentityVerifier:
    """Base class; ``verify`` returns the decoded claims or raises."""

    async def verify(self, token: str) -> dict[str, Any]:
        raise NotImplementedError


# ── Firebase ────────────────────────────────────────────────────────
class FirebaseIdentityVerifier(IdentityVerifier):
    def __init__(self, credentials_path: str) -> None:
        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            cert = firebase_credentials.Certificate(credentials_path)
            self._app = firebase_admin.initialize_app(cert)
            logger.info("Firebase app initialised from %s", credentials_path)

    async def verify(self, token: str) -> dict[str, Any]:
        try:
            # verify_id_token may fetch Google's public certs (blocking I/O)
            return await run_in_threadpool(
                firebase_auth.verify_id_token, token, app=self._app
            )
        except (ValueError, FirebaseError) as exc:
            raise InvalidCredentialError(str(exc)) from exc


# ── Local JWT ───────────────────────────────────────────────────────
class JWTIdentityVerifier(IdentityVerifier):
    def __init__(self, secret: str, algorithm: str) -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidCredentialError(str(exc)) from exc
        if not payload.get("email"):
            raise InvalidCredentialError("Token carries no email claim")
        return payload


def create_identity_token(
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token accepted by :class:`JWTIdentityVerifier`."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": email, "email": email},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """FastAPI dependency — the process-wide verifier for the configured backend."""
    if settings.IDENTITY_PROVIDER == "jwt":
        if settings.SECRET_KEY == INSECURE_SECRET_KEY:
            logger.warning("jwt identity provider is using the default SECRET_KEY; set one in .env")
        return JWTIdentityVerifier(settings.SECRET_KEY, settings.ALGORITHM)
    return FirebaseIdentityVerifier(settings.FIREBASE_CREDENTIALS)
