"""
Membership ledger: the user <-> fanclub relation and its derived counter.

Handles:
- Join / leave with the member_count delta in the same transaction
- Owner enrolment as part of fanclub creation
- Membership and ownership lookups
- member_count audits (report only, never repair)

Every change to the set of membership rows for a fanclub happens together
with the matching member_count change, under a row lock on the fanclub.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, Optional

import structlog
from dateutil.relativedelta import relativedelta
from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import StorageContext
from app.core.errors import AlreadyMember, ConsistencyFault, Forbidden, NotFound
from app.models.base import utcnow
from app.models.fanclub import Fanclub
from app.models.membership import Membership
from app.models.user import User

log = structlog.get_logger()

BILLING_PERIOD = relativedelta(months=1)


def next_payment_date(joined_at: datetime) -> datetime:
    """One calendar month after ``joined_at``; the 31st clamps to the month's last day."""
    return joined_at + BILLING_PERIOD


def is_duplicate_membership(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from the (user_id, fanclub_id) unique constraint.

    Postgres names the constraint; SQLite names the columns.
    """
    message = str(exc.orig)
    return (
        "uq_memberships_user_fanclub" in message
        or "memberships.user_id, memberships.fanclub_id" in message
    )


# ---------------------------------------------------------------------------
# Helpers (all run inside a caller's unit of work)
# ---------------------------------------------------------------------------


async def _lock_fanclub(session: AsyncSession, fanclub_id: uuid.UUID) -> Fanclub:
    result = await session.execute(
        select(Fanclub).where(Fanclub.id == fanclub_id).with_for_update(of=Fanclub)
    )
    fanclub = result.scalar_one_or_none()
    if fanclub is None:
        raise NotFound("Fanclub not found", fanclub_id=str(fanclub_id))
    return fanclub


async def _require_user(session: AsyncSession, user_id: uuid.UUID) -> None:
    if await session.get(User, user_id) is None:
        raise NotFound("User not found", user_id=str(user_id))


async def _adjust_member_count(
    session: AsyncSession, fanclub: Fanclub, delta: int
) -> None:
    """Apply ``delta`` with a single UPDATE, floored at zero."""
    if fanclub.member_count + delta < 0:
        log.error(
            "membership.count_floor_reached",
            fanclub_id=str(fanclub.id),
            member_count=fanclub.member_count,
            delta=delta,
        )
    new_count = Fanclub.member_count + delta
    await session.execute(
        update(Fanclub)
        .where(Fanclub.id == fanclub.id)
        .values(
            member_count=case((new_count < 0, 0), else_=new_count),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    await session.refresh(fanclub)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class MembershipLedger:
    """Owns membership rows and every write to ``Fanclub.member_count``."""

    def __init__(
        self,
        storage: StorageContext,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self._clock = clock

    # -- writes --------------------------------------------------------------

    async def enroll_owner(self, session: AsyncSession, fanclub: Fanclub) -> Membership:
        """Create the owner's membership for a fanclub that is being created.

        Must run inside the unit of work that inserted ``fanclub``.
        """
        membership = Membership(
            user_id=fanclub.owner_id,
            fanclub_id=fanclub.id,
            is_owner=True,
            joined_at=self._clock(),
            next_payment_date=None,
        )
        session.add(membership)
        await session.flush()
        await _adjust_member_count(session, fanclub, +1)
        return membership

    async def join(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> Membership:
        """Add ``user_id`` to the fanclub and bump its member_count by one.

        Duplicate joins are rejected by the (user_id, fanclub_id) unique
        constraint, so two racing joins cannot both commit.
        """
        try:
            async with self.storage.unit_of_work() as session:
                fanclub = await _lock_fanclub(session, fanclub_id)
                await _require_user(session, user_id)

                joined_at = self._clock()
                membership = Membership(
                    user_id=user_id,
                    fanclub_id=fanclub_id,
                    is_owner=False,
                    joined_at=joined_at,
                    next_payment_date=next_payment_date(joined_at),
                )
                session.add(membership)
                await session.flush()
                await _adjust_member_count(session, fanclub, +1)
        except IntegrityError as exc:
            if not is_duplicate_membership(exc):
                raise
            log.info(
                "membership.duplicate_join",
                user_id=str(user_id),
                fanclub_id=str(fanclub_id),
            )
            raise AlreadyMember(
                "Already a member of this fanclub",
                user_id=str(user_id),
                fanclub_id=str(fanclub_id),
            ) from exc

        log.info(
            "membership.joined",
            user_id=str(user_id),
            fanclub_id=str(fanclub_id),
            member_count=fanclub.member_count,
            next_payment_date=str(membership.next_payment_date),
        )
        return membership

    async def leave(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> None:
        """Remove a non-owner membership and decrement member_count."""
        async with self.storage.unit_of_work() as session:
            fanclub = await _lock_fanclub(session, fanclub_id)
            result = await session.execute(
                select(Membership).where(
                    Membership.user_id == user_id,
                    Membership.fanclub_id == fanclub_id,
                )
            )
            membership = result.scalar_one_or_none()
            if membership is None:
                raise Forbidden(
                    "Not a member of this fanclub",
                    user_id=str(user_id),
                    fanclub_id=str(fanclub_id),
                )
            if membership.is_owner:
                raise Forbidden(
                    "The owner cannot leave their own fanclub",
                    user_id=str(user_id),
                    fanclub_id=str(fanclub_id),
                )

            await session.delete(membership)
            await session.flush()
            await _adjust_member_count(session, fanclub, -1)

        log.info(
            "membership.left",
            user_id=str(user_id),
            fanclub_id=str(fanclub_id),
            member_count=fanclub.member_count,
        )

    # -- lookups -------------------------------------------------------------

    async def get_membership(
        self, user_id: uuid.UUID, fanclub_id: uuid.UUID
    ) -> Optional[Membership]:
        async with self.storage.reader() as session:
            result = await session.execute(
                select(Membership).where(
                    Membership.user_id == user_id,
                    Membership.fanclub_id == fanclub_id,
                )
            )
            return result.scalar_one_or_none()

    async def is_member(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> bool:
        """True for any membership, the owner's included."""
        return await self.get_membership(user_id, fanclub_id) is not None

    async def is_owner(self, user_id: uuid.UUID, fanclub_id: uuid.UUID) -> bool:
        membership = await self.get_membership(user_id, fanclub_id)
        return membership is not None and membership.is_owner

    async def list_members(self, fanclub_id: uuid.UUID) -> list[Membership]:
        """Owner first, then members in join order."""
        async with self.storage.reader() as session:
            if await session.get(Fanclub, fanclub_id) is None:
                raise NotFound("Fanclub not found", fanclub_id=str(fanclub_id))
            result = await session.execute(
                select(Membership)
                .where(Membership.fanclub_id == fanclub_id)
                .order_by(Membership.is_owner.desc(), Membership.joined_at, Membership.id)
            )
            return list(result.scalars().all())

    async def list_user_memberships(
        self, user_id: uuid.UUID
    ) -> list[tuple[Membership, Fanclub]]:
        """Every club the user belongs to, most recently joined first."""
        async with self.storage.reader() as session:
            result = await session.execute(
                select(Membership, Fanclub)
                .join(Fanclub, Fanclub.id == Membership.fanclub_id)
                .where(Membership.user_id == user_id)
                .order_by(Membership.joined_at.desc(), Membership.id)
            )
            return [(membership, fanclub) for membership, fanclub in result.all()]

    async def count_members(self, fanclub_id: uuid.UUID) -> int:
        async with self.storage.reader() as session:
            result = await session.execute(
                select(func.count())
                .select_from(Membership)
                .where(Membership.fanclub_id == fanclub_id)
            )
            return result.scalar_one()

    async def verify_member_count(self, fanclub_id: uuid.UUID) -> int:
        """Check the stored counter against the rows. Raises ConsistencyFault on drift.

        Holds the same fanclub row lock as join/leave, so no membership change
        can commit between reading the counter and counting the rows.
        """
        async with self.storage.unit_of_work() as session:
            fanclub = await _lock_fanclub(session, fanclub_id)
            stored = fanclub.member_count
            result = await session.execute(
                select(func.count())
                .select_from(Membership)
                .where(Membership.fanclub_id == fanclub_id)
            )
            actual = result.scalar_one()

        if stored != actual:
            log.error(
                "membership.count_mismatch",
                fanclub_id=str(fanclub_id),
                stored=stored,
                actual=actual,
            )
            raise ConsistencyFault(fanclub_id, stored=stored, actual=actual)
        return actual
