"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database, that a failed
initialization does not prevent startup, and that shutdown closes the
outbound Discord and Blink clients.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from citadel_pow.server.main import lifespan

pytestmark = pytest.mark.asyncio

MODULE = "citadel_pow.server.main"


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_startup_initializes_database(self):
        with patch(f"{MODULE}.init_db", new_callable=AsyncMock) as mock_init, patch(
            f"{MODULE}.close_clients", new_callable=AsyncMock
        ):
            async with lifespan(FastAPI()):
                mock_init.assert_awaited_once()

    async def test_startup_survives_database_failure(self):
        with patch(f"{MODULE}.init_db", new_callable=AsyncMock, side_effect=ConnectionError("refused")), patch(
            f"{MODULE}.close_clients", new_callable=AsyncMock
        ), patch(f"{MODULE}.logger") as mock_logger:
            async with lifespan(FastAPI()):
                pass

        mock_logger.error.assert_called_once()
        assert "Database initialization failed" in mock_logger.error.call_args[0][0]


class TestLifespanShutdown:
    """Test application shutdown lifespan events."""

    async def test_shutdown_closes_clients(self):
        with patch(f"{MODULE}.init_db", new_callable=AsyncMock), patch(
            f"{MODULE}.close_clients", new_callable=AsyncMock
        ) as mock_close:
            async with lifespan(FastAPI()):
                mock_close.assert_not_awaited()

        mock_close.assert_awaited_once()
