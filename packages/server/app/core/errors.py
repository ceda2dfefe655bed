"""
Typed errors raised by the membership and visibility core.

Each error carries a stable ``code`` for programmatic handling and the HTTP
status the transport layer maps it to. Nothing here is retried or swallowed
by the core; callers decide what to do with them.
"""

from __future__ import annotations

from typing import Any, Optional

from fanclub_shared.schemas.common import ErrorCode


class FanclubError(Exception):
    """Base class for every outcome the core reports to its callers."""

    code: ErrorCode = ErrorCode.VALIDATION
    status_code: int = 400

    def __init__(self, message: str, **meta: Any) -> None:
        super().__init__(message)
        self.message = message
        self.meta = meta

    def to_public_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code.value}


class ValidationError(FanclubError):
    """Missing or invalid input; the caller can fix it and try again."""

    code = ErrorCode.VALIDATION
    status_code = 400


class NotFound(FanclubError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class AlreadyMember(FanclubError):
    code = ErrorCode.ALREADY_MEMBER
    status_code = 409


class Forbidden(FanclubError):
    code = ErrorCode.FORBIDDEN
    status_code = 403


class Unauthenticated(FanclubError):
    """A credential was presented but could not be verified."""

    code = ErrorCode.UNAUTHENTICATED
    status_code = 401


class ConsistencyFault(FanclubError):
    """The stored member_count disagrees with the membership rows.

    Raised for investigation only; the core never repairs the counter.
    """

    code = ErrorCode.CONSISTENCY
    status_code = 500

    def __init__(self, fanclub_id, stored: int, actual: int) -> None:
        super().__init__(
            f"member_count for fanclub {fanclub_id} is {stored}, expected {actual}",
            fanclub_id=str(fanclub_id),
            stored=stored,
            actual=actual,
        )
        self.fanclub_id = fanclub_id
        self.stored = stored
        self.actual = actual


def require_text(value: Optional[str], field: str) -> str:
    """Return ``value`` stripped of surrounding whitespace; blank is a ValidationError."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()
