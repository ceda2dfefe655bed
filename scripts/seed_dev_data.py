#!/usr/bin/env python3
"""Seed a development database with users, a fanclub, members and posts.

Usage:
    python scripts/seed_dev_data.py

Requires FC_DATABASE_URL (or defaults to localhost). Prints a bearer token
per seeded user for trying the API by hand.
"""

import asyncio
import uuid

from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import StorageContext
from app.core.identity import issue_token
from app.services.container import ServiceContainer
from fanclub_shared.schemas.common import Visibility

# Deterministic UUIDs for reproducibility
OWNER_ID = uuid.UUID("00000000-0000-4000-8000-000000000010")
MEMBER_IDS = [uuid.UUID(f"00000000-0000-4000-8000-0000000000{i:02d}") for i in range(20, 23)]
VISITOR_ID = uuid.UUID("00000000-0000-4000-8000-000000000030")


async def seed():
    storage = StorageContext.from_settings(get_settings())
    services = ServiceContainer(storage)

    # Users belong to the auth service; insert them directly.
    users = [(OWNER_ID, "Hana", "hana@fanclub.dev")]
    users += [(uid, f"Fan {n}", f"fan{n}@fanclub.dev") for n, uid in enumerate(MEMBER_IDS, 1)]
    users.append((VISITOR_ID, "Visitor", "visitor@fanclub.dev"))
    async with storage.unit_of_work() as session:
        for uid, nickname, email in users:
            await session.execute(text("""
                INSERT INTO users (id, nickname, email) VALUES (:id, :nickname, :email)
                ON CONFLICT (id) DO NOTHING
            """), {"id": uid, "nickname": nickname, "email": email})

    owned = await services.registry.list_owned(OWNER_ID)
    if owned:
        print(f"Already seeded: fanclub {owned[0].id}")
    else:
        fanclub = await services.registry.create(
            OWNER_ID,
            name="Hana Official Fanclub",
            fee=990,
            purpose="Behind-the-scenes updates and early ticket access",
            description="The official club for Hana's fans.",
        )
        for uid in MEMBER_IDS:
            await services.ledger.join(uid, fanclub.id)

        await services.posts.publish(
            OWNER_ID, fanclub.id, "Welcome!", "Thanks for joining the club.",
            visibility=Visibility.PUBLIC,
        )
        await services.posts.publish(
            OWNER_ID, fanclub.id, "Rehearsal diary", "Members-only notes from rehearsal.",
            visibility=Visibility.MEMBERS,
        )
        print(f"Seeded fanclub {fanclub.id} with {len(MEMBER_IDS)} members and 2 posts")

    for uid, nickname, _ in users:
        print(f"  {nickname:<8} {uid}  Bearer {issue_token(uid)}")

    await storage.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
