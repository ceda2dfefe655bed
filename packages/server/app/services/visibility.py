"""
Visibility gate: may this viewer see this post?

Rules:
- ``public`` posts are visible to everyone, anonymous viewers included.
- Any other visibility requires a verified viewer who holds a membership in
  the post's fanclub (owners hold one too).

The viewer must come from the identity layer. A bare user id is rejected so
that a client-chosen identifier can never widen what a request sees. Nothing
is cached between calls; a post whose visibility changed is judged afresh.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from app.core.identity import VerifiedIdentity, Viewer
from app.models.post import Post
from app.services.memberships import MembershipLedger
from fanclub_shared.schemas.common import Visibility


def _check_viewer(viewer: Viewer) -> None:
    if viewer is not None and not isinstance(viewer, VerifiedIdentity):
        raise TypeError(
            f"viewer must be a VerifiedIdentity or None, got {type(viewer).__name__}"
        )


def is_public(post: Post) -> bool:
    return post.visibility == Visibility.PUBLIC.value


def decide(viewer: Viewer, post: Post, is_member: bool) -> bool:
    """The rule itself, given the membership fact for ``viewer`` in ``post``'s fanclub."""
    if is_public(post):
        return True
    if viewer is None:
        return False
    return is_member


class VisibilityGate:
    def __init__(self, ledger: MembershipLedger):
        self.ledger = ledger

    async def can_view(self, viewer: Viewer, post: Post) -> bool:
        _check_viewer(viewer)
        if is_public(post) or viewer is None:
            return decide(viewer, post, is_member=False)
        is_member = await self.ledger.is_member(viewer.user_id, post.fanclub_id)
        return decide(viewer, post, is_member)

    async def filter_visible(
        self, viewer: Viewer, fanclub_id: uuid.UUID, posts: Iterable[Post]
    ) -> list[Post]:
        """Apply ``decide`` to each post of one fanclub, preserving order.

        The membership lookup happens at most once per call and only when a
        non-public post is present.
        """
        _check_viewer(viewer)
        is_member: Optional[bool] = None
        visible = []
        for post in posts:
            if post.fanclub_id != fanclub_id:
                raise ValueError("filter_visible expects posts of a single fanclub")
            if is_member is None and viewer is not None and not is_public(post):
                is_member = await self.ledger.is_member(viewer.user_id, fanclub_id)
            if decide(viewer, post, bool(is_member)):
                visible.append(post)
        return visible
