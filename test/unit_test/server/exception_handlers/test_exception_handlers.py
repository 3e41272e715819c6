"""
Unit tests for server exception handlers.

Tests cover the JSON error envelope of every handler: domain errors,
HTTP exceptions, request validation, upstream integration failures and
unhandled exceptions, plus their registration on the application.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from citadel_pow.core.errors import CitadelPowError, InsufficientBalanceError, UserNotFoundError
from citadel_pow.integrations.blink import BlinkApiError
from citadel_pow.integrations.discord import DiscordApiError
from citadel_pow.server.exception_handlers import setup_exception_handlers
from citadel_pow.server.exception_handlers.global_handler import (
    domain_exception_handler,
    global_exception_handler,
    http_exception_handler,
    upstream_exception_handler,
    validation_exception_handler,
)

MODULE = "citadel_pow.server.exception_handlers.global_handler"


def body_of(response):
    return json.loads(response.body)


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/api/accumulated-sats/deduct"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestDomainExceptionHandler:
    @pytest.mark.asyncio
    async def test_envelope(self, mock_request):
        exc = InsufficientBalanceError(
            "Insufficient accumulated sats. Current: 10, Requested: 11", details={"current": 10, "requested": 11}
        )

        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == 400
        assert body_of(response) == {
            "success": False,
            "detail": "Insufficient accumulated sats. Current: 10, Requested: 11",
            "code": "INSUFFICIENT_BALANCE",
            "details": {"current": 10, "requested": 11},
        }

    @pytest.mark.asyncio
    async def test_subclass_status(self, mock_request):
        response = await domain_exception_handler(mock_request, UserNotFoundError("User not found"))

        assert response.status_code == 404
        assert body_of(response)["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_overridden_status_and_code(self, mock_request):
        exc = CitadelPowError("Teapot", status_code=418, code="TEAPOT")

        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == 418
        assert body_of(response)["details"] is None


class TestHttpExceptionHandler:
    @pytest.mark.asyncio
    async def test_envelope_and_headers(self, mock_request):
        exc = StarletteHTTPException(status_code=501, detail="Blink API not configured", headers={"Retry-After": "60"})

        response = await http_exception_handler(mock_request, exc)

        assert response.status_code == 501
        assert body_of(response) == {"success": False, "detail": "Blink API not configured"}
        assert response.headers["Retry-After"] == "60"


class TestValidationExceptionHandler:
    @pytest.mark.asyncio
    async def test_bad_request(self, mock_request):
        errors = [{"type": "missing", "loc": ("body", "discord_id"), "msg": "Field required", "input": {}}]

        response = await validation_exception_handler(mock_request, RequestValidationError(errors))

        assert response.status_code == 400
        body = body_of(response)
        assert body["success"] is False
        assert body["detail"] == "Invalid request body"
        assert body["errors"][0]["loc"] == ["body", "discord_id"]


class TestUpstreamExceptionHandler:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, detail",
        [
            (BlinkApiError("Invalid amount"), "Blink API error: Invalid amount"),
            (DiscordApiError("Discord message failed: 403", status_code=403), "Discord API error: Discord message failed: 403"),
        ],
    )
    async def test_bad_gateway(self, mock_request, exc, detail):
        with patch(f"{MODULE}.log_error") as mock_log_error:
            response = await upstream_exception_handler(mock_request, exc)

        assert response.status_code == 502
        assert body_of(response) == {"success": False, "detail": detail}
        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][0] == type(exc).__name__

    @pytest.mark.asyncio
    async def test_reports_upstream_status(self, mock_request):
        with patch(f"{MODULE}.log_error") as mock_log_error:
            await upstream_exception_handler(mock_request, BlinkApiError("down", status_code=503))

        assert mock_log_error.call_args[0][2] == {"path": "/api/accumulated-sats/deduct", "upstream_status": 503}


class TestGlobalExceptionHandler:
    @pytest.mark.asyncio
    async def test_logs_error(self, mock_request):
        exc = ValueError("Test error")

        with patch(f"{MODULE}.logger") as mock_logger, patch(f"{MODULE}.log_error"):
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        assert call_args[1]["extra"]["error_type"] == "ValueError"
        assert call_args[1]["extra"]["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_returns_500_with_error_id(self, mock_request):
        with patch(f"{MODULE}.logger"), patch(f"{MODULE}.log_error"):
            response = await global_exception_handler(mock_request, RuntimeError("boom"))

        assert response.status_code == 500
        body = body_of(response)
        assert body["success"] is False
        assert body["detail"] == "Internal server error"
        assert body["error_type"] == "RuntimeError"
        assert len(body["error_id"]) == 12

    @pytest.mark.asyncio
    async def test_unique_error_ids(self, mock_request):
        with patch(f"{MODULE}.logger"), patch(f"{MODULE}.log_error"):
            first = await global_exception_handler(mock_request, RuntimeError("a"))
            second = await global_exception_handler(mock_request, RuntimeError("b"))

        assert body_of(first)["error_id"] != body_of(second)["error_id"]

    @pytest.mark.asyncio
    async def test_request_without_client(self, mock_request):
        mock_request.client = None

        with patch(f"{MODULE}.logger") as mock_logger, patch(f"{MODULE}.log_error"):
            await global_exception_handler(mock_request, RuntimeError("boom"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestSetupExceptionHandlers:
    def test_registers_every_handler(self):
        app = FastAPI()

        setup_exception_handlers(app)

        assert app.exception_handlers[CitadelPowError] is domain_exception_handler
        assert app.exception_handlers[StarletteHTTPException] is http_exception_handler
        assert app.exception_handlers[RequestValidationError] is validation_exception_handler
        assert app.exception_handlers[BlinkApiError] is upstream_exception_handler
        assert app.exception_handlers[DiscordApiError] is upstream_exception_handler
        assert app.exception_handlers[Exception] is global_exception_handler
