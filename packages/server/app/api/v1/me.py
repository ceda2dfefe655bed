"""
Caller-scoped endpoints.

GET /api/v1/me/memberships — Fanclubs the caller belongs to, with renewal dates
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_services
from app.core.identity import VerifiedIdentity, require_identity
from app.services.container import ServiceContainer
from fanclub_shared.schemas.fanclubs import FanclubResponse
from fanclub_shared.schemas.memberships import (
    MembershipResponse,
    UserMembershipItem,
    UserMembershipListResponse,
)

router = APIRouter()


@router.get("/memberships", response_model=UserMembershipListResponse)
async def list_my_memberships(
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    rows = await services.ledger.list_user_memberships(identity.user_id)
    return UserMembershipListResponse(
        data=[
            UserMembershipItem(
                membership=MembershipResponse.model_validate(membership),
                fanclub=FanclubResponse.model_validate(fanclub),
            )
            for membership, fanclub in rows
        ]
    )
