"""Post schemas for publishing and members-only reads."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, UUID4

from .common import Visibility


class PostCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None
    excerpt: Optional[str] = Field(None, max_length=500)
    featured_image_url: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC


class PostVisibilityUpdate(BaseModel):
    visibility: Visibility


class PostRead(BaseModel):
    id: UUID4
    fanclub_id: UUID4
    author_id: UUID4
    author_name: Optional[str] = None
    author_avatar: Optional[str] = None
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    visibility: Visibility
    like_count: int = 0
    comment_count: int = 0
    published_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostCreatedResponse(BaseModel):
    id: UUID4
    message: str = "Post created"


class PostListResponse(BaseModel):
    data: list[PostRead]
