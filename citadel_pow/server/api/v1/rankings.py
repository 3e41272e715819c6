"""
Ranking API Endpoints.

Includes:
- Weekly leaderboard, for a given or the current ISO week
- A user's ranking history
- Category rankings by focus time or by donated sats, cached in-process
"""

from typing import List, Optional, Tuple, Union

from fastapi import APIRouter, Query

from citadel_pow.core.database import utc_now
from citadel_pow.core.database.entities import Ranking, User
from citadel_pow.core.errors import InvalidRequestError
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    CategoryRankingResponse,
    CurrentLeaderboardResponse,
    DonationRankingEntry,
    LeaderboardEntry,
    LeaderboardResponse,
    RankingType,
    TimeRankingEntry,
)
from citadel_pow.server.services.deps import RankingCacheDep, RankingRepoDep, UserRepoDep
from citadel_pow.server.services.ranking_cache import ranking_cache_key

logger = get_logger(__name__)
router = APIRouter()


def _int_param(name: str, value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as e:
        raise InvalidRequestError(f"Invalid {name} parameter", details={name: value}) from e


def _entries(rows: List[Tuple[Ranking, User]]) -> List[LeaderboardEntry]:
    return [
        LeaderboardEntry(
            discord_username=user.discord_username,
            discord_avatar=user.discord_avatar,
            pow_score=ranking.pow_score,
            rank=ranking.rank,
            week_number=ranking.week_number,
            year=ranking.year,
            updated_at=ranking.updated_at,
        )
        for ranking, user in rows
    ]


@router.get(
    "",
    response_model=LeaderboardResponse,
    summary="Leaderboard",
    description="Rankings joined with users, ordered by rank, optionally for one week and year.",
    responses={400: {"description": "Non-numeric week, year or limit"}},
)
async def leaderboard(
    rankings: RankingRepoDep,
    week: Optional[str] = Query(default=None, description="ISO week number"),
    year: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None, description="Defaults to 100"),
):
    week_number = _int_param("week", week)
    year_number = _int_param("year", year)
    limit_number = _int_param("limit", limit)
    rows = await rankings.leaderboard(
        week=week_number, year=year_number, limit=limit_number if limit_number is not None else 100
    )
    data = _entries(rows)
    return LeaderboardResponse(data=data, count=len(data))


@router.get(
    "/current",
    response_model=CurrentLeaderboardResponse,
    summary="Current Week Leaderboard",
    description="Leaderboard of the current ISO week and year (UTC).",
)
async def current_leaderboard(rankings: RankingRepoDep):
    iso = utc_now().isocalendar()
    rows = await rankings.leaderboard(week=iso[1], year=iso[0])
    data = _entries(rows)
    return CurrentLeaderboardResponse(data=data, count=len(data), week=iso[1], year=iso[0])


@router.get(
    "/user/{discord_id}",
    response_model=LeaderboardResponse,
    summary="User Ranking History",
    description="The user's last ten rankings, newest first.",
    responses={404: {"description": "User not found"}},
)
async def user_rankings(discord_id: str, users: UserRepoDep, rankings: RankingRepoDep):
    user = await users.require_by_discord_id(discord_id)
    data = _entries(await rankings.history_for_user(user.id, limit=10))
    return LeaderboardResponse(data=data, count=len(data))


@router.get(
    "/by-category",
    response_model=CategoryRankingResponse,
    summary="Category Ranking",
    description="Users ranked by focus time or by completed donations within a category.",
    responses={400: {"description": "Unknown ranking type"}},
)
async def category_ranking(
    rankings: RankingRepoDep,
    cache: RankingCacheDep,
    type: str = Query(default="time", description="time or donation"),
    category: str = Query(default="all"),
    limit: int = Query(default=10, ge=1, le=100),
):
    """
    Rank users within a category.

    - **time**: Study and POW session seconds, summed per user.
    - **donation**: Completed donation amounts, summed per user.

    Results are cached per type, category and limit until a session or a
    donation of that category is written, or the TTL expires.
    """
    try:
        ranking_type = RankingType(type)
    except ValueError as e:
        raise InvalidRequestError('Invalid type. Use "time" or "donation"', details={"type": type}) from e

    key = ranking_cache_key(ranking_type.value, category, limit)
    cached = cache.get(key)
    if cached is not None:
        logger.debug(f"Ranking cache hit: {key}")
        return cached

    scope = None if category == "all" else category
    data: List[Union[TimeRankingEntry, DonationRankingEntry]]
    if ranking_type is RankingType.TIME:
        totals = await rankings.time_totals(category=scope, limit=limit)
        data = [
            TimeRankingEntry(
                rank=index,
                discord_id=t.user.discord_id,
                discord_username=t.user.discord_username,
                discord_avatar=t.user.discord_avatar,
                total_seconds=t.total,
                total_minutes=round(t.total / 60, 1),
                session_count=t.count,
                last_activity_at=t.last_activity_at,
            )
            for index, t in enumerate(totals, start=1)
        ]
    else:
        totals = await rankings.donation_totals(category=scope, limit=limit)
        data = [
            DonationRankingEntry(
                rank=index,
                discord_id=t.user.discord_id,
                discord_username=t.user.discord_username,
                discord_avatar=t.user.discord_avatar,
                total_donations=t.total,
                donation_count=t.count,
                last_activity_at=t.last_activity_at,
            )
            for index, t in enumerate(totals, start=1)
        ]

    response = CategoryRankingResponse(type=ranking_type, category=category, data=data, count=len(data))
    cache.set(key, response)
    return response
