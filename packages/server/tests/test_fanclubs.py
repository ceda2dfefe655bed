"""
Tests for the fanclub registry.

Covers:
- Input validation on create
- Owner membership created together with the fanclub
- Lookup, listing and search
- The one-owner-per-fanclub database constraint
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFound, ValidationError
from app.models.fanclub import Fanclub
from app.models.membership import Membership


async def _backdate(storage, fanclub_id, days_ago: int) -> None:
    created = datetime(2025, 6, 1, tzinfo=timezone.utc) - timedelta(days=days_ago)
    async with storage.unit_of_work() as session:
        await session.execute(
            update(Fanclub).where(Fanclub.id == fanclub_id).values(created_at=created)
        )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_name_required(self, services, make_user, name):
        owner = await make_user()
        with pytest.raises(ValidationError) as exc_info:
            await services.registry.create(owner, name=name, fee=0, purpose="p")
        assert exc_info.value.meta["field"] == "name"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("purpose", [None, ""])
    async def test_purpose_required(self, services, make_user, purpose):
        owner = await make_user()
        with pytest.raises(ValidationError) as exc_info:
            await services.registry.create(owner, name="Club", fee=0, purpose=purpose)
        assert exc_info.value.meta["field"] == "purpose"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fee", [-1, 9.5, "500", True])
    async def test_fee_must_be_non_negative_integer(self, services, make_user, fee):
        owner = await make_user()
        with pytest.raises(ValidationError) as exc_info:
            await services.registry.create(owner, name="Club", fee=fee, purpose="p")
        assert exc_info.value.meta["field"] == "monthly_fee"

    @pytest.mark.asyncio
    async def test_rejected_input_leaves_nothing_behind(self, services, make_user):
        owner = await make_user()
        with pytest.raises(ValidationError):
            await services.registry.create(owner, name="Club", fee=-5, purpose="p")
        assert await services.registry.list_owned(owner) == []


@pytest.mark.asyncio
async def test_create_enrolls_owner(services, make_user):
    owner = await make_user("owner")
    fanclub = await services.registry.create(
        owner,
        name="Star Club",
        fee=1200,
        purpose="Support the artist",
        cover_ref="covers/star.png",
        description="Official club",
    )

    assert fanclub.id is not None
    assert fanclub.owner_id == owner
    assert fanclub.member_count == 1
    assert fanclub.monthly_fee == 1200
    assert fanclub.cover_image_url == "covers/star.png"

    members = await services.ledger.list_members(fanclub.id)
    assert len(members) == 1
    assert members[0].user_id == owner
    assert members[0].is_owner is True


@pytest.mark.asyncio
async def test_missing_fee_defaults_to_free(services, make_user):
    fanclub = await services.registry.create(await make_user(), name="Free", fee=None, purpose="p")
    assert fanclub.monthly_fee == 0


@pytest.mark.asyncio
async def test_create_for_unknown_owner(services):
    with pytest.raises(NotFound):
        await services.registry.create(uuid.uuid4(), name="Ghost", fee=0, purpose="p")
    assert await services.registry.list_all() == []


@pytest.mark.asyncio
async def test_database_rejects_second_owner(storage, services, make_user, fanclub_factory):
    fanclub, _ = await fanclub_factory()
    intruder = await make_user("intruder")

    with pytest.raises(IntegrityError):
        async with storage.unit_of_work() as session:
            session.add(Membership(user_id=intruder, fanclub_id=fanclub.id, is_owner=True))

    assert await services.ledger.count_members(fanclub.id) == 1


# ---------------------------------------------------------------------------
# Lookup and listing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get(services, fanclub_factory):
    fanclub, owner = await fanclub_factory(name="Lookup")
    loaded = await services.registry.get(fanclub.id)
    assert loaded.name == "Lookup"
    assert loaded.owner_id == owner


@pytest.mark.asyncio
async def test_get_unknown(services):
    with pytest.raises(NotFound):
        await services.registry.get(uuid.uuid4())


@pytest.mark.asyncio
async def test_list_all_and_owned(services, make_user, fanclub_factory):
    owner = await make_user("prolific")
    first, _ = await fanclub_factory(name="One", owner_id=owner)
    second, _ = await fanclub_factory(name="Two", owner_id=owner)
    other, _ = await fanclub_factory(name="Other")

    assert {f.id for f in await services.registry.list_all()} == {first.id, second.id, other.id}
    assert {f.id for f in await services.registry.list_owned(owner)} == {first.id, second.id}


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    @pytest.mark.asyncio
    async def test_matches_any_text_field_case_insensitively(self, services, fanclub_factory):
        by_name, _ = await fanclub_factory(name="Blue Moon Fans")
        by_description, _ = await fanclub_factory(name="Club A", description="We love the MOON")
        by_purpose, _ = await fanclub_factory(name="Club B", purpose="moonlight concerts")
        await fanclub_factory(name="Sunshine")

        results = await services.registry.search("moon")
        assert {f.id for f in results} == {by_name.id, by_description.id, by_purpose.id}

    @pytest.mark.asyncio
    async def test_no_match(self, services, fanclub_factory):
        await fanclub_factory(name="Sunshine")
        assert await services.registry.search("nothing like this") == []

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, services, fanclub_factory):
        percent, _ = await fanclub_factory(name="100% Fans")
        await fanclub_factory(name="1000 Fans")
        underscore, _ = await fanclub_factory(name="a_b club")
        await fanclub_factory(name="axb club")

        assert [f.id for f in await services.registry.search("100%")] == [percent.id]
        assert [f.id for f in await services.registry.search("a_b")] == [underscore.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", "  "])
    async def test_blank_query_rejected(self, services, query):
        with pytest.raises(ValidationError):
            await services.registry.search(query)

    @pytest.mark.asyncio
    async def test_newest_first(self, storage, services, fanclub_factory):
        oldest, _ = await fanclub_factory(name="Moon I")
        newest, _ = await fanclub_factory(name="Moon III")
        middle, _ = await fanclub_factory(name="Moon II")
        await _backdate(storage, oldest.id, days_ago=30)
        await _backdate(storage, middle.id, days_ago=10)
        await _backdate(storage, newest.id, days_ago=1)

        expected = [newest.id, middle.id, oldest.id]
        assert [f.id for f in await services.registry.search("moon")] == expected
        assert [f.id for f in await services.registry.list_all()] == expected


@pytest.mark.asyncio
async def test_text_fields_are_trimmed(services, make_user):
    fanclub = await services.registry.create(
        await make_user(), name="  Star Club ", fee=0, purpose=" Support  "
    )
    assert fanclub.name == "Star Club"
    assert fanclub.purpose == "Support"


@pytest.mark.asyncio
async def test_listings_carry_owner_name(services, make_user, fanclub_factory):
    owner = await make_user("hana")
    fanclub, _ = await fanclub_factory(name="Hana Club", owner_id=owner)

    assert (await services.registry.get(fanclub.id)).owner_name == "hana"
    assert [f.owner_name for f in await services.registry.list_all()] == ["hana"]
    assert [f.owner_name for f in await services.registry.search("hana")] == ["hana"]
