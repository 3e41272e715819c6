from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.database import get_session
from citadel_pow.server.main import app
from citadel_pow.server.services import deps
from citadel_pow.server.services.ranking_cache import ranking_cache

TEST_CHANNEL_ID = "222222222222222222"


@pytest.fixture(autouse=True)
def _clear_ranking_cache():
    ranking_cache.invalidate_all()
    yield
    ranking_cache.invalidate_all()


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession,
    blink_client,
    discord_bot_client,
    discord_webhook_client,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client bound to the test database and the fake upstream services."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[deps.get_blink_client] = lambda: blink_client
    app.dependency_overrides[deps.get_discord_bot_client] = lambda: discord_bot_client
    app.dependency_overrides[deps.get_pow_channel_id] = lambda: TEST_CHANNEL_ID
    app.dependency_overrides[deps.get_discord_webhook_client] = lambda: discord_webhook_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    return {"discord_id": "100000000000000001", "discord_username": "satoshi", "discord_avatar": "avatar-hash"}


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient, user_payload):
    response = await client.post("/api/users", json=user_payload)
    assert response.status_code == 201
    return response.json()["data"]
