"""Membership schemas: join results, member listings, a user's clubs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, UUID4

from .fanclubs import FanclubResponse


class MembershipResponse(BaseModel):
    id: UUID4
    user_id: UUID4
    fanclub_id: UUID4
    is_owner: bool
    joined_at: datetime
    next_payment_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MemberListResponse(BaseModel):
    data: list[MembershipResponse]


class UserMembershipItem(BaseModel):
    """One of the caller's memberships together with the club it belongs to."""
    membership: MembershipResponse
    fanclub: FanclubResponse


class UserMembershipListResponse(BaseModel):
    data: list[UserMembershipItem]
