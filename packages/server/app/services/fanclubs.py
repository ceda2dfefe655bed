"""
Fanclub registry: creation, lookup and search of fanclub records.

The registry never writes ``member_count`` itself; the owner's membership
and the first count increment come from the membership ledger, inside the
same unit of work that inserts the fanclub.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlmodel import select

from app.core.database import StorageContext
from app.core.errors import NotFound, ValidationError, require_text
from app.models.fanclub import Fanclub
from app.models.user import User
from app.services.memberships import MembershipLedger

log = structlog.get_logger()


def _validate_fee(fee: Optional[int]) -> int:
    if fee is None:
        return 0
    if isinstance(fee, bool) or not isinstance(fee, int):
        raise ValidationError("monthly_fee must be an integer", field="monthly_fee")
    if fee < 0:
        raise ValidationError("monthly_fee must not be negative", field="monthly_fee")
    return fee


class FanclubRegistry:
    """Owns fanclub rows; delegates membership bookkeeping to the ledger."""

    def __init__(self, storage: StorageContext, ledger: MembershipLedger):
        self.storage = storage
        self.ledger = ledger

    async def create(
        self,
        owner_id: uuid.UUID,
        name: Optional[str],
        fee: Optional[int],
        purpose: Optional[str],
        cover_ref: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Fanclub:
        """Create a fanclub and its owner membership as one unit of work."""
        name = require_text(name, "name")
        purpose = require_text(purpose, "purpose")
        fee = _validate_fee(fee)

        async with self.storage.unit_of_work() as session:
            if await session.get(User, owner_id) is None:
                raise NotFound("User not found", user_id=str(owner_id))

            fanclub = Fanclub(
                name=name,
                description=description,
                monthly_fee=fee,
                purpose=purpose,
                cover_image_url=cover_ref,
                owner_id=owner_id,
                member_count=0,
            )
            session.add(fanclub)
            await session.flush()
            await self.ledger.enroll_owner(session, fanclub)

        log.info(
            "fanclub.created",
            fanclub_id=str(fanclub.id),
            owner_id=str(owner_id),
            monthly_fee=fee,
        )
        return fanclub

    async def get(self, fanclub_id: uuid.UUID) -> Fanclub:
        async with self.storage.reader() as session:
            fanclub = await session.get(Fanclub, fanclub_id)
        if fanclub is None:
            raise NotFound("Fanclub not found", fanclub_id=str(fanclub_id))
        return fanclub

    async def list_all(self) -> list[Fanclub]:
        """Every fanclub, newest first."""
        async with self.storage.reader() as session:
            result = await session.execute(
                select(Fanclub).order_by(Fanclub.created_at.desc(), Fanclub.id.desc())
            )
            return list(result.scalars().all())

    async def search(self, query: Optional[str]) -> list[Fanclub]:
        """Case-insensitive substring match over name, description and purpose.

        ``%`` and ``_`` in the query match themselves, not any character.
        """
        query = require_text(query, "query")
        async with self.storage.reader() as session:
            result = await session.execute(
                select(Fanclub)
                .where(
                    or_(
                        Fanclub.name.icontains(query, autoescape=True),
                        Fanclub.description.icontains(query, autoescape=True),
                        Fanclub.purpose.icontains(query, autoescape=True),
                    )
                )
                .order_by(Fanclub.created_at.desc(), Fanclub.id.desc())
            )
            fanclubs = list(result.scalars().all())

        log.debug("fanclub.searched", query=query, results=len(fanclubs))
        return fanclubs

    async def list_owned(self, owner_id: uuid.UUID) -> list[Fanclub]:
        async with self.storage.reader() as session:
            result = await session.execute(
                select(Fanclub)
                .where(Fanclub.owner_id == owner_id)
                .order_by(Fanclub.created_at.desc(), Fanclub.id.desc())
            )
            return list(result.scalars().all())
