"""
ARQ background task: audit every fanclub's member_count against its rows.

Scheduled to run periodically (e.g., every hour). Mismatches are logged and
counted; the counter is left untouched so the cause can be investigated.
"""

from __future__ import annotations

import structlog
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import StorageContext
from app.core.errors import ConsistencyFault, NotFound
from app.models.fanclub import Fanclub
from app.services.memberships import MembershipLedger

log = structlog.get_logger()


async def audit_member_counts(ctx: dict) -> int:
    """Verify every fanclub. Returns the number of mismatches found.

    ``ctx["storage"]`` may carry a StorageContext; otherwise one is built from
    settings for the duration of the run.
    """
    storage = ctx.get("storage")
    owns_storage = storage is None
    if owns_storage:
        storage = StorageContext.from_settings(get_settings())

    ledger = MembershipLedger(storage)
    faults: list[ConsistencyFault] = []
    try:
        async with storage.reader() as session:
            result = await session.execute(select(Fanclub.id))
            fanclub_ids = list(result.scalars().all())

        for fanclub_id in fanclub_ids:
            try:
                await ledger.verify_member_count(fanclub_id)
            except ConsistencyFault as fault:
                faults.append(fault)
            except NotFound:
                continue
    finally:
        if owns_storage:
            await storage.dispose()

    log.info(
        "member_count_audit.finished",
        fanclubs=len(fanclub_ids),
        mismatches=len(faults),
    )
    return len(faults)


# ARQ worker settings
class WorkerSettings:
    """ARQ worker configuration."""

    functions = [audit_member_counts]
    cron_jobs = [
        # Run every hour
        {
            "coroutine": audit_member_counts,
            "hour": None,  # every hour
            "minute": 0,
        },
    ]
