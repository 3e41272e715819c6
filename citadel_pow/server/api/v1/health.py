"""
Service status endpoints.

``/health`` is polled by the deployment platform: it answers 200 only while the
database answers a trivial query, and lists which outbound integrations
(Blink, Discord bot, Discord webhook) are configured so a missing key shows up
without calling the dependent routes. ``/version`` reports the build.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from citadel_pow import __version__
from citadel_pow.core.logging_config import get_logger
from citadel_pow.server.core import constant
from citadel_pow.server.core.config import settings
from citadel_pow.server.services.deps import SessionDep

router = APIRouter()
logger = get_logger(__name__)


def _integrations() -> dict:
    return {
        "blink": settings.blink.is_configured,
        "discord_bot": settings.discord.can_share,
        "discord_webhook": bool(settings.discord.webhook_url),
    }


@router.get(
    "/health",
    summary="Health Check",
    description="Check that the API server can reach its database.",
    response_description="Status object.",
    responses={503: {"description": "Database unreachable"}},
)
async def health_check(session: SessionDep):
    try:
        await session.exec(text("SELECT 1"))  # type: ignore[call-overload]
    except SQLAlchemyError as e:
        logger.error(f"Health check failed, database unreachable: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable", "integrations": _integrations()},
        )
    return {"status": "ok", "database": "ok", "integrations": _integrations()}


@router.get(
    "/version",
    summary="Get Version",
    response_description="Version object.",
)
async def version():
    """API version, response schema version and deployment environment."""
    return {
        "version": __version__,
        "schema_version": constant.API_SCHEMA_VERSION,
        "environment": settings.environment,
    }
