"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request timing), registers exception handlers and includes all API
routers under ``/api``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from citadel_pow import __version__
from citadel_pow.core.database import init_db
from citadel_pow.core.logging_config import get_logger, setup_logging
from citadel_pow.core.monitoring import initialize_logfire

from .api.v1 import (
    accumulated_sats,
    blink,
    discord_posts,
    donations,
    health,
    meetups,
    pow_sessions,
    rankings,
    study_sessions,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.deps import close_clients

# Initialize logging
setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates tables on startup when configured and closes the outbound
    Discord and Blink clients on shutdown.
    """
    try:
        logger.info("Starting up Citadel POW API...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Citadel POW API...")
    await close_clients()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Citadel POW API

    Backend of the Citadel proof-of-work study tracker. Users log POW sessions,
    accumulate sats, donate them over Lightning (Blink), share completion cards
    to Discord, and join organizer-run group meetups with QR check-in.
    """,
    version=__version__,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_origin_regex=cors.origin_regex,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
    expose_headers=cors.expose_headers,
    max_age=cors.max_age,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)


app.include_router(health.router, prefix=constant.API_PREFIX, tags=["health"])
app.include_router(users.router, prefix=f"{constant.API_PREFIX}/users", tags=["users"])
app.include_router(
    accumulated_sats.router, prefix=f"{constant.API_PREFIX}/accumulated-sats", tags=["accumulated-sats"]
)
app.include_router(donations.router, prefix=f"{constant.API_PREFIX}/donations", tags=["donations"])
app.include_router(pow_sessions.router, prefix=f"{constant.API_PREFIX}/pow-sessions", tags=["pow-sessions"])
app.include_router(study_sessions.router, prefix=f"{constant.API_PREFIX}/study-sessions", tags=["study-sessions"])
app.include_router(rankings.router, prefix=f"{constant.API_PREFIX}/rankings", tags=["rankings"])
app.include_router(discord_posts.router, prefix=f"{constant.API_PREFIX}/discord-posts", tags=["discord-posts"])
app.include_router(blink.router, prefix=f"{constant.API_PREFIX}/blink", tags=["blink"])
app.include_router(meetups.router, prefix=f"{constant.API_PREFIX}/meetups", tags=["meetups"])
