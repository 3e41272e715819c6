"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables and that
the grouped configuration views expose them consistently.
"""

import pytest
from pydantic import ValidationError

from citadel_pow.server.core.config import (
    DEFAULT_CORS_ORIGINS,
    DEFAULT_QR_SECRET,
    BlinkConfig,
    CORSConfig,
    DiscordConfig,
    MeetupConfig,
    Settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove variables pinned by the test session so defaults are visible."""
    for name in (
        "DATABASE_URL",
        "MEETUP_QR_SECRET",
        "ENVIRONMENT",
        "DISCORD_BOT_TOKEN",
        "DISCORD_WEBHOOK_URL",
        "POW_CHANNEL_ID",
        "BLINK_API_ENDPOINT",
        "BLINK_API_KEY",
        "ORGANIZER_DISCORD_IDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def make_settings() -> Settings:
    return Settings(_env_file=None)


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_defaults(self, clean_env):
        settings = make_settings()

        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000
        assert settings.log_level == "INFO"
        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS
        assert settings.rankings_cache_ttl_seconds == 300.0
        assert settings.meetup_qr_ttl_seconds == 3600

    def test_server_binding(self, clean_env):
        clean_env.setenv("CITADEL_POW_SERVER_HOST", "127.0.0.1")
        clean_env.setenv("CITADEL_POW_SERVER_PORT", "9000")
        clean_env.setenv("CITADEL_POW_LOG_LEVEL", "DEBUG")

        settings = make_settings()

        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9000
        assert settings.log_level == "DEBUG"

    def test_database_url_binding(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///./pow.db")
        assert make_settings().database.url == "sqlite+aiosqlite:///./pow.db"

    def test_cors_origins_json_binding(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://a.example", "https://b.example"]')
        assert make_settings().cors.origins == ["https://a.example", "https://b.example"]

    def test_case_sensitive(self, clean_env):
        clean_env.setenv("database_url", "sqlite+aiosqlite://")
        assert make_settings().database_url.startswith("postgresql+asyncpg://")


class TestGroupedConfigs:
    def test_discord_can_share(self, clean_env):
        assert make_settings().discord.can_share is False

        clean_env.setenv("DISCORD_BOT_TOKEN", "token")
        assert make_settings().discord.can_share is False

        clean_env.setenv("POW_CHANNEL_ID", "222")
        discord = make_settings().discord
        assert isinstance(discord, DiscordConfig)
        assert discord.can_share is True
        assert discord.api_base_url == "https://discord.com/api/v10"

    def test_blink_is_configured(self, clean_env):
        assert make_settings().blink.is_configured is False

        clean_env.setenv("BLINK_API_ENDPOINT", "https://api.blink.sv/graphql")
        clean_env.setenv("BLINK_API_KEY", "blink_key")
        blink = make_settings().blink
        assert isinstance(blink, BlinkConfig)
        assert blink.is_configured is True
        assert blink.default_memo == "Citadel POW Donation"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", []),
            ("111", ["111"]),
            ("111, 222 ,,333", ["111", "222", "333"]),
        ],
    )
    def test_meetup_organizer_ids(self, clean_env, raw, expected):
        clean_env.setenv("ORGANIZER_DISCORD_IDS", raw)
        meetup = make_settings().meetup
        assert isinstance(meetup, MeetupConfig)
        assert meetup.organizer_ids == expected

    def test_cors_config(self, clean_env):
        cors = make_settings().cors
        assert isinstance(cors, CORSConfig)
        assert "PATCH" in cors.allow_methods
        assert cors.max_age == 600

    def test_rankings_config(self, clean_env):
        clean_env.setenv("RANKINGS_CACHE_TTL_SECONDS", "12.5")
        assert make_settings().rankings.cache_ttl_seconds == 12.5


class TestQrSecretCheck:
    """The default QR secret is only accepted in development."""

    @pytest.mark.parametrize("environment", ["development", "test", "Development"])
    def test_default_secret_allowed_in_development(self, clean_env, environment):
        clean_env.setenv("ENVIRONMENT", environment)
        assert make_settings().meetup_qr_secret == DEFAULT_QR_SECRET

    @pytest.mark.parametrize("environment", ["production", "staging"])
    def test_default_secret_rejected_outside_development(self, clean_env, environment):
        clean_env.setenv("ENVIRONMENT", environment)

        with pytest.raises(ValidationError, match="MEETUP_QR_SECRET must be set"):
            make_settings()

    def test_configured_secret_accepted_in_production(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "production")
        clean_env.setenv("MEETUP_QR_SECRET", "s3cret")

        settings = make_settings()

        assert settings.meetup.qr_secret == "s3cret"


class TestConfigModels:
    def test_populate_by_name(self):
        assert BlinkConfig(endpoint="https://x", api_key="k").is_configured is True
        assert MeetupConfig(organizer_discord_ids="1,2").organizer_ids == ["1", "2"]

    def test_populate_by_alias(self):
        assert DiscordConfig.model_validate({"DISCORD_BOT_TOKEN": "t", "POW_CHANNEL_ID": "c"}).can_share is True
