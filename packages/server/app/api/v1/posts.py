"""
Post endpoints: publishing and gated reads.

GET   /api/v1/fanclubs/{fanclubId}/posts — Posts the caller may see, newest first
POST  /api/v1/fanclubs/{fanclubId}/posts — Publish (owner only)
GET   /api/v1/posts/{postId}             — One post, members-only content gated
PATCH /api/v1/posts/{postId}/visibility  — Change visibility (owner only)

The viewer for every read is the verified session identity, or anonymous.
A ``user_id`` query parameter is not part of this API and has no effect.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_services
from app.core.identity import VerifiedIdentity, Viewer, get_viewer, require_identity
from app.services.container import ServiceContainer
from fanclub_shared.schemas.posts import (
    PostCreate,
    PostCreatedResponse,
    PostListResponse,
    PostRead,
    PostVisibilityUpdate,
)

router = APIRouter()


@router.get("/fanclubs/{fanclubId}/posts", response_model=PostListResponse)
async def list_posts(
    fanclubId: uuid.UUID,
    viewer: Viewer = Depends(get_viewer),
    services: ServiceContainer = Depends(get_services),
):
    posts = await services.posts.list_visible_posts(fanclubId, viewer)
    return PostListResponse(data=[PostRead.model_validate(p) for p in posts])


@router.post("/fanclubs/{fanclubId}/posts", response_model=PostCreatedResponse, status_code=201)
async def create_post(
    fanclubId: uuid.UUID,
    body: PostCreate,
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    post = await services.posts.publish(
        identity.user_id,
        fanclubId,
        title=body.title,
        content=body.content,
        visibility=body.visibility,
        excerpt=body.excerpt,
        featured_image_url=body.featured_image_url,
    )
    return PostCreatedResponse(id=post.id)


@router.get("/posts/{postId}", response_model=PostRead)
async def get_post(
    postId: uuid.UUID,
    viewer: Viewer = Depends(get_viewer),
    services: ServiceContainer = Depends(get_services),
):
    post = await services.posts.view_post(viewer, postId)
    return PostRead.model_validate(post)


@router.patch("/posts/{postId}/visibility", response_model=PostRead)
async def update_visibility(
    postId: uuid.UUID,
    body: PostVisibilityUpdate,
    identity: VerifiedIdentity = Depends(require_identity),
    services: ServiceContainer = Depends(get_services),
):
    post = await services.posts.update_visibility(identity.user_id, postId, body.visibility)
    return PostRead.model_validate(post)
