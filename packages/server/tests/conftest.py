"""
Shared fixtures: a file-backed SQLite database per test, the service
container wired around it, factories for users and fanclubs, and an HTTP
client for the app.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.database import StorageContext
from app.core.identity import issue_token
from app.main import create_app
from app.models.user import User
from app.services.container import ServiceContainer


@pytest.fixture
async def storage(tmp_path):
    ctx = StorageContext(f"sqlite+aiosqlite:///{tmp_path / 'fanclub.db'}")
    await ctx.create_all()
    yield ctx
    await ctx.dispose()


@pytest.fixture
def services(storage) -> ServiceContainer:
    return ServiceContainer(storage)


@pytest.fixture
def make_user(storage) -> Callable[..., Awaitable[uuid.UUID]]:
    """Insert a user row the way the signup flow would; returns its id."""

    async def _make_user(nickname: str = "fan") -> uuid.UUID:
        user = User(
            nickname=nickname,
            email=f"{nickname}-{uuid.uuid4().hex[:8]}@example.com",
            password_hash="opaque",
        )
        async with storage.unit_of_work() as session:
            session.add(user)
        return user.id

    return _make_user


@pytest.fixture
def fanclub_factory(services, make_user):
    """Create a fanclub owned by a fresh user; returns (fanclub, owner_id)."""

    async def _create(name: str = "Star Club", fee: int = 500, **kwargs):
        owner_id = kwargs.pop("owner_id", None) or await make_user("owner")
        fanclub = await services.registry.create(
            owner_id,
            name=name,
            fee=fee,
            purpose=kwargs.pop("purpose", "Support the artist"),
            **kwargs,
        )
        return fanclub, owner_id

    return _create


@pytest.fixture
async def client(storage):
    """HTTP client against an app wired to the test database."""
    app = create_app(storage=storage)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[[uuid.UUID], dict]:
    def _headers(user_id: uuid.UUID) -> dict:
        return {"Authorization": f"Bearer {issue_token(user_id)}"}

    return _headers
