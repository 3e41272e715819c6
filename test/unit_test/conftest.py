from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.pool import StaticPool

from citadel_pow.core.database import create_all, create_sessionmaker
from citadel_pow.core.database.entities import User
from citadel_pow.core.database.repositories import UserRepository
from citadel_pow.integrations.blink import BlinkClient
from citadel_pow.integrations.discord import DiscordBotClient, DiscordWebhookClient
from test.unit_test.fakes import FakeBlink, FakeDiscord

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with every table for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def make_user(session: AsyncSession):
    """Factory creating users by Discord id."""

    async def _make(discord_id: str = "100000000000000001", username: str = "satoshi", avatar=None) -> User:
        return await UserRepository(session).upsert(discord_id, username, discord_avatar=avatar)

    return _make


@pytest.fixture
def fake_blink() -> FakeBlink:
    return FakeBlink()


@pytest.fixture
def fake_discord() -> FakeDiscord:
    return FakeDiscord()


@pytest_asyncio.fixture
async def blink_client(fake_blink: FakeBlink, test_config) -> AsyncGenerator[BlinkClient, None]:
    client = BlinkClient(
        test_config.integration.blink_endpoint,
        "blink_test_key",
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake_blink)),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def discord_bot_client(fake_discord: FakeDiscord, test_config) -> AsyncGenerator[DiscordBotClient, None]:
    client = DiscordBotClient(
        "bot-token",
        base_url=test_config.integration.discord_api_base_url,
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake_discord)),
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def discord_webhook_client(
    fake_discord: FakeDiscord, test_config
) -> AsyncGenerator[DiscordWebhookClient, None]:
    client = DiscordWebhookClient(
        test_config.integration.discord_webhook_url,
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake_discord)),
    )
    yield client
    await client.aclose()
