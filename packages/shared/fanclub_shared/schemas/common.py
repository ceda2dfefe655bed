"""Enums and the error body shared by every endpoint."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Visibility(str, Enum):
    PUBLIC = "public"
    MEMBERS = "members"


class ErrorCode(str, Enum):
    VALIDATION = "request.invalid"
    NOT_FOUND = "resource.not_found"
    ALREADY_MEMBER = "membership.already_member"
    FORBIDDEN = "access.forbidden"
    CONSISTENCY = "membership.count_mismatch"
    UNAUTHENTICATED = "auth.unauthenticated"


class ErrorResponse(BaseModel):
    detail: str
    code: ErrorCode
    # Field-level problems, present only for malformed requests
    errors: Optional[list[dict]] = None
