"""
POW Session API Endpoints.

POW sessions are the current record of finished focus sessions. Durations
and goals are stored in seconds (minutes are derived for older clients) and
the achievement rate is computed whenever a session is read.

Includes:
- Session listing with category, period and date filters
- Per-user statistics and today's summary
- Single and bulk creation (bulk is used to migrate browser-local history)
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Query, status

from citadel_pow.core.database.entities import DiscordPost, PowSession
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiListResponse,
    ApiResponse,
    DiscordPostLink,
    PowSessionBulkCreate,
    PowSessionCreate,
    PowSessionFields,
    PowSessionRead,
    PowTodaySessionsResponse,
    SessionListResponse,
    SessionStatsRead,
)
from citadel_pow.server.services.deps import PowSessionRepoDep, RankingCacheDep, UserRepoDep
from citadel_pow.server.services.pow_metrics import (
    achievement_rate,
    period_bounds,
    resolve_seconds,
    seconds_to_minutes,
    session_window,
)

logger = get_logger(__name__)
router = APIRouter()


def to_read(item: PowSession, posts: Optional[List[DiscordPost]] = None) -> PowSessionRead:
    rate = achievement_rate(
        duration_seconds=item.duration_seconds,
        duration_minutes=item.duration_minutes,
        goal_seconds=item.goal_seconds,
        goal_minutes=item.goal_minutes,
    )
    return PowSessionRead(
        **item.model_dump(),
        achievement_rate=rate,
        discord_posts=[DiscordPostLink.model_validate(p) for p in posts or []],
    )


def build_pow_session(user_id: str, fields: PowSessionFields) -> PowSession:
    """Map a request onto a row, resolving legacy names and minute-based durations."""
    duration_seconds = resolve_seconds(fields.duration_seconds, fields.duration_minutes)
    goal_seconds = resolve_seconds(fields.goal_seconds, fields.goal_minutes)
    return PowSession(
        user_id=user_id,
        pow_fields=fields.pow_fields or fields.donation_mode or "pow-writing",
        pow_plan_text=fields.pow_plan_text or fields.plan_text or "",
        start_time=fields.start_time,
        end_time=fields.end_time,
        duration_seconds=duration_seconds,
        duration_minutes=seconds_to_minutes(duration_seconds),
        goal_seconds=goal_seconds,
        goal_minutes=seconds_to_minutes(goal_seconds),
        photo_url=fields.photo_url,
    )


@router.get(
    "/user/{discord_id}",
    response_model=SessionListResponse[PowSessionRead],
    summary="List User POW Sessions",
    description="A user's POW sessions, newest first, with linked Discord posts.",
    responses={400: {"description": "Invalid period or date"}, 404: {"description": "User not found"}},
)
async def list_user_sessions(
    discord_id: str,
    users: UserRepoDep,
    sessions: PowSessionRepoDep,
    limit: int = Query(default=50, ge=1, le=500),
    category: Optional[str] = Query(default=None, description="pow_fields filter; 'all' disables it"),
    period: Optional[str] = Query(default=None, description="today, week or month"),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
):
    """
    List a user's POW sessions.

    - **category**: Only sessions of this POW category.
    - **period**: today, week (last seven days) or month (since the 1st).
    - **date**: Only sessions created on this day; combines with period.
    """
    user = await users.require_by_discord_id(discord_id)
    start, end = session_window(period, date)
    items = await sessions.list_for_user(user.id, category=category, start=start, end=end, limit=limit)
    posts: Dict[str, List[DiscordPost]] = await sessions.posts_by_session([i.id for i in items])
    data = [to_read(item, posts.get(item.id)) for item in items]
    return SessionListResponse[PowSessionRead](
        data=data,
        count=len(data),
        filters={"category": category or "all", "period": period, "date": date},
    )


@router.get(
    "/stats/{discord_id}",
    response_model=ApiResponse[SessionStatsRead],
    summary="User POW Statistics",
    description="Session count, total and average duration, and last activity of a user.",
    responses={404: {"description": "User not found"}},
)
async def user_stats(discord_id: str, users: UserRepoDep, sessions: PowSessionRepoDep):
    user = await users.require_by_discord_id(discord_id)
    stats = await sessions.stats_for_user(user.id)
    return ApiResponse(
        data=SessionStatsRead(
            discord_id=user.discord_id,
            discord_username=user.discord_username,
            discord_avatar=user.discord_avatar,
            total_sessions=stats.total_sessions,
            total_study_seconds=stats.total_study_seconds,
            total_study_minutes=stats.total_study_minutes,
            avg_session_minutes=stats.avg_session_minutes,
            last_study_at=stats.last_study_at,
        )
    )


@router.get(
    "/today/{discord_id}",
    response_model=PowTodaySessionsResponse,
    summary="Today's POW Sessions",
    description="Sessions created today (UTC) with total minutes and seconds.",
    responses={404: {"description": "User not found"}},
)
async def today_sessions(discord_id: str, users: UserRepoDep, sessions: PowSessionRepoDep):
    user = await users.require_by_discord_id(discord_id)
    start, end = period_bounds("today")
    items = await sessions.list_for_user(user.id, start=start, end=end)
    return PowTodaySessionsResponse(
        data=[to_read(item) for item in items],
        count=len(items),
        total_minutes=sum(item.duration_minutes for item in items),
        total_seconds=sum(item.duration_seconds or item.duration_minutes * 60 for item in items),
    )


@router.post(
    "",
    response_model=ApiResponse[PowSessionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create POW Session",
    description="Record a finished POW session.",
    responses={404: {"description": "User not found"}},
)
async def create_session(
    body: PowSessionCreate, users: UserRepoDep, sessions: PowSessionRepoDep, cache: RankingCacheDep
):
    """
    Create a POW session.

    - **pow_fields** / **donation_mode**: POW category, defaults to pow-writing.
    - **pow_plan_text** / **plan_text**: The plan, defaults to empty.
    - **duration_seconds**: Takes priority over **duration_minutes**.
    - **goal_seconds**: Takes priority over **goal_minutes**.
    - **achievement_rate**, **donation_id**: Accepted and ignored.
    """
    user = await users.require_by_discord_id(body.discord_id)
    item = await sessions.create(build_pow_session(user.id, body))
    logger.info(f"POW session created: id={item.id}, user={body.discord_id}, seconds={item.duration_seconds}")
    cache.invalidate_category(item.pow_fields)
    return ApiResponse(data=to_read(item))


@router.post(
    "/bulk",
    response_model=ApiListResponse[PowSessionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Bulk Create POW Sessions",
    description="Record several finished POW sessions at once.",
    responses={404: {"description": "User not found"}},
)
async def bulk_create_sessions(
    body: PowSessionBulkCreate, users: UserRepoDep, sessions: PowSessionRepoDep, cache: RankingCacheDep
):
    user = await users.require_by_discord_id(body.discord_id)
    items = await sessions.create_many([build_pow_session(user.id, s) for s in body.sessions])
    logger.info(f"Bulk created {len(items)} POW sessions for {body.discord_id}")
    for category in {item.pow_fields for item in items}:
        cache.invalidate_category(category)
    data = [to_read(item) for item in items]
    return ApiListResponse(data=data, count=len(data))
