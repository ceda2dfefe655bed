"""
Identity context for the fanclub core.

The core never authenticates anyone. A request arrives with a bearer token
(``Authorization: Bearer ...``) or the session cookie issued by the auth
service; this module verifies the signature and hands the rest of the system a
``VerifiedIdentity``. Anything that is not a ``VerifiedIdentity`` (a raw id from
a query string, a form field, a header) is never treated as a viewer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from app.core.config import get_settings
from app.core.errors import Unauthenticated

log = structlog.get_logger()

bearer_header = APIKeyHeader(name="Authorization", auto_error=False)


@dataclass(frozen=True)
class VerifiedIdentity:
    """A user id whose credential has been checked by this module."""

    user_id: uuid.UUID


# The viewer passed to the visibility gate: a verified identity or None.
Viewer = Optional[VerifiedIdentity]


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def issue_token(user_id: uuid.UUID, *, expires_delta: timedelta | None = None) -> str:
    """Sign a session token. Used by development seeding and tests."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> VerifiedIdentity:
    """Decode and verify a session token. Raises Unauthenticated on failure."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        log.info("identity.rejected", reason=type(exc).__name__)
        raise Unauthenticated("Invalid or expired session") from exc
    return VerifiedIdentity(user_id=user_id)


# ---------------------------------------------------------------------------
# Request dependencies
# ---------------------------------------------------------------------------

def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.strip().partition(" ")
        # Auth schemes are case-insensitive (RFC 7235).
        if scheme.lower() == "bearer":
            return credentials.strip() or None
    return request.cookies.get(get_settings().session_cookie_name)


async def get_viewer(
    request: Request,
    authorization: Optional[str] = Depends(bearer_header),
) -> Viewer:
    """Verified identity of the caller, or None for anonymous requests."""
    token = _extract_token(request, authorization)
    if token is None:
        return None
    identity = verify_token(token)
    request.state.identity = identity
    return identity


async def require_identity(viewer: Viewer = Depends(get_viewer)) -> VerifiedIdentity:
    """Write endpoints need a verified caller."""
    if viewer is None:
        raise Unauthenticated("Authentication required")
    return viewer
