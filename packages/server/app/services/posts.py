"""
Post store: publishing, visibility changes and gated reads.

Handles:
- Publishing (owner only, via AuthorizationPolicy)
- Visibility updates, re-checked by the gate on every later read
- Listing a fanclub's posts filtered server-side through VisibilityGate
"""

from __future__ import annotations

import uuid
from typing import Optional, Union

import structlog
from sqlmodel import select

from app.core.database import StorageContext
from app.core.errors import Forbidden, NotFound, ValidationError, require_text
from app.core.identity import Viewer
from app.models.base import utcnow
from app.models.fanclub import Fanclub
from app.models.post import Post
from app.services.policy import AuthorizationPolicy
from app.services.visibility import VisibilityGate
from fanclub_shared.schemas.common import Visibility

log = structlog.get_logger()


def _coerce_visibility(value: Union[Visibility, str, None]) -> Visibility:
    if value is None:
        return Visibility.PUBLIC
    try:
        return Visibility(value)
    except ValueError:
        raise ValidationError(
            f"Unknown visibility '{value}'", field="visibility"
        ) from None


class PostStore:
    def __init__(
        self,
        storage: StorageContext,
        policy: AuthorizationPolicy,
        gate: VisibilityGate,
    ):
        self.storage = storage
        self.policy = policy
        self.gate = gate

    async def _require_fanclub(self, fanclub_id: uuid.UUID) -> None:
        async with self.storage.reader() as session:
            if await session.get(Fanclub, fanclub_id) is None:
                raise NotFound("Fanclub not found", fanclub_id=str(fanclub_id))

    # -- writes --------------------------------------------------------------

    async def publish(
        self,
        author_id: uuid.UUID,
        fanclub_id: uuid.UUID,
        title: Optional[str],
        content: Optional[str],
        visibility: Union[Visibility, str, None] = Visibility.PUBLIC,
        excerpt: Optional[str] = None,
        featured_image_url: Optional[str] = None,
    ) -> Post:
        title = require_text(title, "title")
        content = require_text(content, "content")
        visibility = _coerce_visibility(visibility)

        await self._require_fanclub(fanclub_id)
        # Ownership is fixed at creation, so the check cannot go stale
        # before the insert below.
        await self.policy.require_publish(author_id, fanclub_id)

        now = utcnow()
        post = Post(
            fanclub_id=fanclub_id,
            author_id=author_id,
            title=title,
            content=content,
            excerpt=excerpt,
            featured_image_url=featured_image_url,
            visibility=visibility.value,
            published_at=now,
            created_at=now,
            updated_at=now,
        )
        async with self.storage.unit_of_work() as session:
            session.add(post)
            await session.flush()

        log.info(
            "post.published",
            post_id=str(post.id),
            fanclub_id=str(fanclub_id),
            visibility=visibility.value,
        )
        return post

    async def update_visibility(
        self,
        user_id: uuid.UUID,
        post_id: uuid.UUID,
        visibility: Union[Visibility, str],
    ) -> Post:
        visibility = _coerce_visibility(visibility)
        post = await self.get_post(post_id)
        await self.policy.require_publish(user_id, post.fanclub_id)

        async with self.storage.unit_of_work() as session:
            post = await session.get(Post, post_id)
            if post is None:
                raise NotFound("Post not found", post_id=str(post_id))
            post.visibility = visibility.value
            post.updated_at = utcnow()
            session.add(post)
            await session.flush()

        log.info("post.visibility_changed", post_id=str(post_id), visibility=visibility.value)
        return post

    # -- reads ---------------------------------------------------------------

    async def get_post(self, post_id: uuid.UUID) -> Post:
        """Raw lookup; callers that return content must go through ``view_post``."""
        async with self.storage.reader() as session:
            post = await session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found", post_id=str(post_id))
        return post

    async def view_post(self, viewer: Viewer, post_id: uuid.UUID) -> Post:
        post = await self.get_post(post_id)
        if not await self.gate.can_view(viewer, post):
            raise Forbidden("Members-only post", post_id=str(post_id))
        return post

    async def list_visible_posts(self, fanclub_id: uuid.UUID, viewer: Viewer) -> list[Post]:
        """Posts of one fanclub that ``viewer`` may see, newest first."""
        async with self.storage.reader() as session:
            if await session.get(Fanclub, fanclub_id) is None:
                raise NotFound("Fanclub not found", fanclub_id=str(fanclub_id))
            result = await session.execute(
                select(Post)
                .where(Post.fanclub_id == fanclub_id)
                .order_by(Post.published_at.desc(), Post.id.desc())
            )
            posts = list(result.scalars().all())

        return await self.gate.filter_visible(viewer, fanclub_id, posts)
