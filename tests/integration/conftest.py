"""Integration-test fixtures (require a migrated PostgreSQL and Redis).

Pre-condition: PostgreSQL + Redis running and `alembic upgrade head` applied,
then RUN_INTEGRATION=1 pytest tests/integration.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from src.main import app
from src.tf_common.database import async_session_factory
from src.tf_profile.application.service import ProfileService

Register = Callable[[], Awaitable[tuple[str, dict[str, str]]]]


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RUN_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set RUN_INTEGRATION=1 with PG + Redis running")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client: AsyncClient) -> Register:
    """Register + log in a fresh user; returns (user_id, auth headers)."""

    async def _register() -> tuple[str, dict[str, str]]:
        email = f"it_{uuid.uuid4().hex[:10]}@example.com"
        password = "TestPass1"
        reg = await client.post("/api/v1/auth/register", json={"email": email, "password": password})
        assert reg.status_code == 201, reg.text
        login = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        token = login.json()["data"]["access_token"]
        return reg.json()["data"]["user_id"], {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
def promote_to_admin() -> Callable[[str], Awaitable[None]]:
    """Grant ADMIN directly through the profile service."""

    async def _promote(user_id: str) -> None:
        async with async_session_factory() as db:
            await ProfileService().grant_admin(db, user_id)

    return _promote
