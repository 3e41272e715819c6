"""
User API Endpoints.

Users are keyed by their Discord id. The bot and the web client upsert
profiles on login; settings and profile statistics are read per user.
"""

from fastapi import APIRouter, status

from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import ApiResponse, UserRead, UserSettingsUpdate, UserStats, UserUpsert
from citadel_pow.server.services.deps import DiscordPostRepoDep, DonationRepoDep, RankingRepoDep, UserRepoDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/{discord_id}",
    response_model=ApiResponse[UserRead],
    summary="Get User",
    description="Retrieve a user by Discord id.",
    responses={404: {"description": "User not found"}},
)
async def get_user(discord_id: str, users: UserRepoDep):
    user = await users.require_by_discord_id(discord_id)
    return ApiResponse(data=UserRead.model_validate(user))


@router.post(
    "",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create or Update User",
    description="Create the user, or refresh the username and avatar of an existing Discord id.",
)
async def upsert_user(user_in: UserUpsert, users: UserRepoDep):
    """
    Upsert a user.

    - **discord_id**: Discord user id (unique).
    - **discord_username**: Current Discord display name.
    - **discord_avatar**: Optional avatar; left unchanged when omitted.
    """
    profile = user_in.model_dump(include={"discord_avatar"}, exclude_unset=True)
    user = await users.upsert(user_in.discord_id, user_in.discord_username, **profile)
    logger.info(f"User upserted: discord_id={user_in.discord_id}")
    return ApiResponse(data=UserRead.model_validate(user))


@router.patch(
    "/{discord_id}/settings",
    response_model=ApiResponse[UserRead],
    summary="Update User Settings",
    description="Change when the user's accumulated sats are donated (per session or in total).",
    responses={404: {"description": "User not found"}},
)
async def update_settings(discord_id: str, settings_in: UserSettingsUpdate, users: UserRepoDep):
    user = await users.require_by_discord_id(discord_id)
    scope = settings_in.donation_scope.value if settings_in.donation_scope else None
    user = await users.update_settings(user, donation_scope=scope)
    return ApiResponse(data=UserRead.model_validate(user))


@router.get(
    "/{discord_id}/stats",
    response_model=ApiResponse[UserStats],
    summary="Get User Statistics",
    description="Current rank and score, completed SAT donation totals and Discord engagement of a user.",
    responses={404: {"description": "User not found"}},
)
async def get_user_stats(
    discord_id: str,
    users: UserRepoDep,
    rankings: RankingRepoDep,
    donations: DonationRepoDep,
    posts: DiscordPostRepoDep,
):
    """
    Get user statistics.

    Donation totals count completed SAT donations only. Rank and score come
    from the user's most recent ranking row.
    """
    user = await users.require_by_discord_id(discord_id)
    latest = await rankings.latest_for_user(user.id)
    totals = await donations.totals(user_id=user.id, currency="SAT")
    post_count, engagement = await posts.engagement_for_user(user.id)
    return ApiResponse(
        data=UserStats(
            user=UserRead.model_validate(user),
            current_rank=latest.rank if latest else None,
            current_score=latest.pow_score if latest else 0,
            total_donated_sats=totals.total_amount,
            total_donated=totals.total_amount,
            donation_count=totals.total_donations,
            post_count=post_count,
            total_engagement=engagement,
        )
    )
