"""
Fanclub and membership endpoints.

GET    /api/v1/fanclubs                  — List all fanclubs
GET    /api/v1/fanclubs/search?q=        — Search name/description/purpose
GET    /api/v1/fanclubs/{fanclubId}      — Fanclub details
POST   /api/v1/fanclubs                  — Create a fanclub (caller becomes owner)
POST   /api/v1/fanclubs/{fanclubId}/join — Join as a member
DELETE /api/v1/fanclubs/{fanclubId}/leave — Leave (not allowed for the owner)
GET    /api/v1/fanclubs/{fanclubId}/members — Membership rows, owner first
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_services
from app.core.identity import VerifiedIdentity, require_identity
from app.services.container import ServiceContainer
from fanclub_shared.schemas.fanclubs import (
    FanclubCreatedResponse,
    FanclubCreateRequest,
    FanclubListResponse,
    FanclubResponse,
)
from fanclub_shared.schemas.memberships import MemberListResponse, MembershipResponse

router = APIRouter()


@router.get("", response_model=FanclubListResponse)
async def list_fanclubs(services: ServiceContainer = Depends(get_services)):
    fanclubs = await services.registry.list_all()
    return FanclubListResponse(data=[FanclubResponse.model_validate(f) for f in fanclubs])


@router.get("/search", response_model=FanclubListResponse)
async def search_fanclubs(
    q: Optional[str] = Query(None, description="Substring to match"),
    services: ServiceContainer = Depends(get_services),
):
    fanclubs = await services.registry.search(q)
    return FanclubListResponse(data=[FanclubResponse.model_validate(f) for f in fanclubs])


@router.get("/{fanclubId}", response_model=FanclubResponse)
async def get_fanclub(
    fanclubId: uuid.UUID,
    services: ServiceContainer = Depends(get_services),
):
    fanclub = await services.registry.get(fanclubId)
    return FanclubResponse.model_validate(fanclub)


@router.post("", response_model=FanclubCreatedResponse, status_code=201)
async def create_fanclub(
    body: FanclubCreateRequest,
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    """Create a fanclub. The caller becomes its owner and first member."""
    fanclub = await services.registry.create(
        identity.user_id,
        name=body.name,
        fee=body.monthly_fee,
        purpose=body.purpose,
        cover_ref=body.cover_image_url,
        description=body.description,
    )
    return FanclubCreatedResponse(id=fanclub.id)


@router.post("/{fanclubId}/join", response_model=MembershipResponse)
async def join_fanclub(
    fanclubId: uuid.UUID,
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    membership = await services.ledger.join(identity.user_id, fanclubId)
    return MembershipResponse.model_validate(membership)


@router.delete("/{fanclubId}/leave")
async def leave_fanclub(
    fanclubId: uuid.UUID,
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    await services.ledger.leave(identity.user_id, fanclubId)
    return {"message": "Left the fanclub"}


@router.get("/{fanclubId}/members", response_model=MemberListResponse)
async def list_members(
    fanclubId: uuid.UUID,
    services: ServiceContainer = Depends(get_services),
):
    members = await services.ledger.list_members(fanclubId)
    return MemberListResponse(data=[MembershipResponse.model_validate(m) for m in members])
