"""Unit tests for server services dependencies.

Tests verify the dependency annotations used by the routers and the
lifecycle of the outbound client singletons.
"""

import pytest
import pytest_asyncio
from fastapi import HTTPException

from citadel_pow.core.database.repositories import MeetupRepository, UserRepository
from citadel_pow.integrations.blink import BlinkClient
from citadel_pow.integrations.discord import DiscordBotClient, DiscordWebhookClient
from citadel_pow.server.core.config import settings
from citadel_pow.server.services import deps
from citadel_pow.server.services.ranking_cache import ranking_cache


@pytest_asyncio.fixture(autouse=True)
async def reset_clients():
    await deps.close_clients()
    yield
    await deps.close_clients()


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(settings, "blink_api_endpoint", "https://mock.blink.sv/graphql")
    monkeypatch.setattr(settings, "blink_api_key", "blink_key")
    monkeypatch.setattr(settings, "discord_bot_token", "bot-token")
    monkeypatch.setattr(settings, "pow_channel_id", "222")
    monkeypatch.setattr(settings, "discord_webhook_url", "https://mock.discord.com/api/webhooks/1/token")
    return monkeypatch


@pytest.fixture
def unconfigured(monkeypatch):
    for name in ("blink_api_endpoint", "blink_api_key", "discord_bot_token", "pow_channel_id", "discord_webhook_url"):
        monkeypatch.setattr(settings, name, None)
    return monkeypatch


class TestAnnotations:
    @pytest.mark.parametrize(
        "annotation,dependency",
        [
            (deps.UserRepoDep, deps.get_user_repository),
            (deps.MeetupRepoDep, deps.get_meetup_repository),
            (deps.RankingCacheDep, deps.get_ranking_cache),
            (deps.BlinkClientDep, deps.get_blink_client),
            (deps.DiscordBotClientDep, deps.get_discord_bot_client),
            (deps.PowChannelDep, deps.get_pow_channel_id),
            (deps.DiscordWebhookClientDep, deps.get_discord_webhook_client),
        ],
    )
    def test_dep_uses_provider(self, annotation, dependency):
        assert annotation.__metadata__[0].dependency == dependency


class TestRepositories:
    async def test_repositories_bind_session(self, session):
        assert deps.get_user_repository(session).session is session
        assert isinstance(deps.get_user_repository(session), UserRepository)
        assert isinstance(deps.get_meetup_repository(session), MeetupRepository)

    def test_ranking_cache_is_shared(self):
        assert deps.get_ranking_cache() is ranking_cache


class TestUnconfiguredClients:
    def test_blink_501(self, unconfigured):
        with pytest.raises(HTTPException) as exc_info:
            deps.get_blink_client()
        assert exc_info.value.status_code == 501
        assert exc_info.value.detail == "Blink API not configured"

    def test_discord_bot_501(self, unconfigured):
        with pytest.raises(HTTPException) as exc_info:
            deps.get_discord_bot_client()
        assert exc_info.value.status_code == 501
        assert exc_info.value.detail == "Discord configuration missing"

    def test_discord_bot_needs_channel(self, unconfigured):
        unconfigured.setattr(settings, "discord_bot_token", "bot-token")
        with pytest.raises(HTTPException):
            deps.get_discord_bot_client()
        with pytest.raises(HTTPException):
            deps.get_pow_channel_id()

    def test_webhook_is_optional(self, unconfigured):
        assert deps.get_discord_webhook_client() is None


class TestConfiguredClients:
    def test_singletons(self, configured):
        blink = deps.get_blink_client()
        bot = deps.get_discord_bot_client()
        webhook = deps.get_discord_webhook_client()

        assert isinstance(blink, BlinkClient)
        assert isinstance(bot, DiscordBotClient)
        assert isinstance(webhook, DiscordWebhookClient)
        assert deps.get_blink_client() is blink
        assert deps.get_discord_bot_client() is bot
        assert deps.get_discord_webhook_client() is webhook
        assert deps.get_pow_channel_id() == "222"

    def test_clients_use_settings(self, configured):
        assert deps.get_blink_client().api_key == "blink_key"
        assert deps.get_blink_client().default_memo == "Citadel POW Donation"
        assert deps.get_discord_bot_client().bot_token == "bot-token"

    async def test_close_clients_resets(self, configured):
        blink = deps.get_blink_client()

        await deps.close_clients()

        assert deps.get_blink_client() is not blink
