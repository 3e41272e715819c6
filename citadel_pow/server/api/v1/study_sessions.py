"""
Study Session API Endpoints.

Study sessions are the legacy session record. They keep the achievement
rate sent by the client and are still read by older clients and by the
Discord post linking.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from citadel_pow.core.database.entities import DiscordPost, StudySession
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiListResponse,
    ApiResponse,
    DiscordPostLink,
    SessionListResponse,
    SessionStatsRead,
    StudySessionBulkCreate,
    StudySessionCreate,
    StudySessionRead,
    TodaySessionsResponse,
)
from citadel_pow.server.services.deps import RankingCacheDep, StudySessionRepoDep, UserRepoDep
from citadel_pow.server.services.pow_metrics import period_bounds, resolve_seconds, seconds_to_minutes, session_window

logger = get_logger(__name__)
router = APIRouter()


def to_read(item: StudySession, posts: Optional[List[DiscordPost]] = None) -> StudySessionRead:
    return StudySessionRead(
        **item.model_dump(),
        discord_posts=[DiscordPostLink.model_validate(p) for p in posts or []],
    )


@router.get(
    "/user/{discord_id}",
    response_model=SessionListResponse[StudySessionRead],
    summary="List User Study Sessions",
    description="A user's study sessions, newest first, with linked Discord posts.",
    responses={400: {"description": "Invalid period or date"}, 404: {"description": "User not found"}},
)
async def list_user_sessions(
    discord_id: str,
    users: UserRepoDep,
    sessions: StudySessionRepoDep,
    limit: int = Query(default=50, ge=1, le=500),
    category: Optional[str] = Query(default=None, description="donation_mode filter; 'all' disables it"),
    period: Optional[str] = Query(default=None, description="today, week or month"),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
):
    user = await users.require_by_discord_id(discord_id)
    start, end = session_window(period, date)
    items = await sessions.list_for_user(user.id, category=category, start=start, end=end, limit=limit)
    posts = await sessions.posts_by_session([i.id for i in items])
    data = [to_read(item, posts.get(item.id)) for item in items]
    return SessionListResponse[StudySessionRead](
        data=data,
        count=len(data),
        filters={"category": category or "all", "period": period, "date": date},
    )


@router.get(
    "/stats/{discord_id}",
    response_model=ApiResponse[SessionStatsRead],
    summary="User Study Statistics",
    responses={404: {"description": "User not found"}},
)
async def user_stats(discord_id: str, users: UserRepoDep, sessions: StudySessionRepoDep):
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
    response_model=TodaySessionsResponse[StudySessionRead],
    summary="Today's Study Sessions",
    responses={404: {"description": "User not found"}},
)
async def today_sessions(discord_id: str, users: UserRepoDep, sessions: StudySessionRepoDep):
    user = await users.require_by_discord_id(discord_id)
    start, end = period_bounds("today")
    items = await sessions.list_for_user(user.id, start=start, end=end)
    return TodaySessionsResponse[StudySessionRead](
        data=[to_read(item) for item in items],
        count=len(items),
        total_minutes=sum(item.duration_minutes for item in items),
    )


@router.post(
    "",
    response_model=ApiResponse[StudySessionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Study Session",
    responses={404: {"description": "User not found"}},
)
async def create_session(
    body: StudySessionCreate, users: UserRepoDep, sessions: StudySessionRepoDep, cache: RankingCacheDep
):
    """
    Create a study session.

    - **duration_seconds**: Takes priority over **duration_minutes**.
    - **achievement_rate**: Stored as sent (0-200).
    """
    user = await users.require_by_discord_id(body.discord_id)
    duration_seconds = resolve_seconds(body.duration_seconds, body.duration_minutes)
    item = await sessions.create(
        StudySession(
            user_id=user.id,
            donation_mode=body.donation_mode,
            plan_text=body.plan_text,
            start_time=body.start_time,
            end_time=body.end_time,
            duration_seconds=duration_seconds,
            duration_minutes=seconds_to_minutes(duration_seconds),
            goal_minutes=body.goal_minutes,
            goal_seconds=body.goal_minutes * 60,
            achievement_rate=body.achievement_rate,
            photo_url=body.photo_url,
            donation_id=body.donation_id,
        )
    )
    logger.info(f"Study session created: id={item.id}, user={body.discord_id}")
    cache.invalidate_category(item.donation_mode)
    return ApiResponse(data=to_read(item))


@router.post(
    "/bulk",
    response_model=ApiListResponse[StudySessionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Bulk Create Study Sessions",
    responses={404: {"description": "User not found"}},
)
async def bulk_create_sessions(
    body: StudySessionBulkCreate, users: UserRepoDep, sessions: StudySessionRepoDep, cache: RankingCacheDep
):
    user = await users.require_by_discord_id(body.discord_id)
    items = await sessions.create_many(
        [
            StudySession(
                user_id=user.id,
                donation_mode=s.donation_mode,
                plan_text=s.plan_text,
                start_time=s.start_time,
                end_time=s.end_time,
                duration_minutes=s.duration_minutes,
                duration_seconds=s.duration_minutes * 60,
                goal_minutes=s.goal_minutes,
                goal_seconds=s.goal_minutes * 60,
                achievement_rate=s.achievement_rate,
                photo_url=s.photo_url,
                donation_id=s.donation_id,
            )
            for s in body.sessions
        ]
    )
    logger.info(f"Bulk created {len(items)} study sessions for {body.discord_id}")
    for category in {item.donation_mode for item in items}:
        cache.invalidate_category(category)
    data = [to_read(item) for item in items]
    return ApiListResponse(data=data, count=len(data))
