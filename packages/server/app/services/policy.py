"""
Publishing authorization.

Only a fanclub's owner may publish into it. Kept as its own decision point so
that a multi-author model changes this module and nothing else.
"""

from __future__ import annotations

import uuid

import structlog

from app.core.errors import Forbidden
from app.services.memberships import MembershipLedger

log = structlog.get_logger()


class AuthorizationPolicy:
    def __init__(self, ledger: MembershipLedger):
        self.ledger = ledger

    async def can_publish(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> bool:
        return await self.ledger.is_owner(user_id, fanclub_id)

    async def require_publish(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> None:
        if not await self.can_publish(user_id, fanclub_id):
            log.info("post.publish_denied", user_id=str(user_id), fanclub_id=str(fanclub_id))
            raise Forbidden(
                "Only the fanclub owner can publish posts",
                user_id=str(user_id),
                fanclub_id=str(fanclub_id),
            )
