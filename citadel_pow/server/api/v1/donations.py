"""
Donation API Endpoints.

Donation aggregates (top donors, recent donations, statistics) count
completed donations only. Creating a completed donation announces it on
the Discord webhook in the background.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Query, status

from citadel_pow.core.database import utc_now
from citadel_pow.core.database.entities import Donation, DonationStatus
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiListResponse,
    ApiResponse,
    DonationCreate,
    DonationRead,
    DonationStatsRead,
    RecentDonationRead,
    TopDonorRead,
    TopDonorsResponse,
    UserDonationsRead,
    UserDonationsResponse,
)
from citadel_pow.server.services.deps import (
    DiscordWebhookClientDep,
    DonationRepoDep,
    RankingCacheDep,
    UserRepoDep,
)
from citadel_pow.server.services.notifications import notify_donation
from citadel_pow.server.services.pow_metrics import month_bounds

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/top",
    response_model=TopDonorsResponse,
    summary="Top Donors",
    description="Completed donations summed per user, largest total first.",
)
async def top_donors(
    donations: DonationRepoDep,
    limit: int = Query(default=50, ge=1, le=500),
    category: Optional[str] = Query(default=None, description="donation_mode filter; 'all' disables it"),
):
    totals = await donations.top_donors(category=category, limit=limit)
    data = [
        TopDonorRead(
            discord_id=t.user.discord_id,
            discord_username=t.user.discord_username,
            discord_avatar=t.user.discord_avatar,
            total_donated=t.total_donated,
            donation_count=t.donation_count,
            last_donation_at=t.last_donation_at,
        )
        for t in totals
    ]
    return TopDonorsResponse(data=data, count=len(data), category=category or "all")


@router.get(
    "/recent",
    response_model=ApiListResponse[RecentDonationRead],
    summary="Recent Donations",
    description="Latest completed donations with the donor's username and avatar.",
)
async def recent_donations(donations: DonationRepoDep, limit: int = Query(default=20, ge=1, le=200)):
    rows = await donations.recent(limit=limit)
    data = [
        RecentDonationRead(
            **DonationRead.model_validate(donation).model_dump(),
            discord_username=user.discord_username,
            discord_avatar=user.discord_avatar,
        )
        for donation, user in rows
    ]
    return ApiListResponse(data=data, count=len(data))


@router.get(
    "/stats",
    response_model=ApiResponse[DonationStatsRead],
    summary="Donation Statistics",
    description="Total amount, number and average of completed donations.",
)
async def donation_stats(donations: DonationRepoDep):
    totals = await donations.totals()
    return ApiResponse(
        data=DonationStatsRead(
            total_amount=totals.total_amount,
            total_donations=totals.total_donations,
            average_donation=totals.average_donation,
        )
    )


@router.get(
    "/user/{discord_id}",
    response_model=UserDonationsResponse,
    summary="User Donations",
    description="All donations of a user, newest first, optionally for one month and category.",
    responses={400: {"description": "Invalid month"}, 404: {"description": "User not found"}},
)
async def user_donations(
    discord_id: str,
    users: UserRepoDep,
    donations: DonationRepoDep,
    month: Optional[str] = Query(default=None, description="YYYY-MM"),
    category: Optional[str] = Query(default=None),
):
    user = await users.require_by_discord_id(discord_id)
    start, end = month_bounds(month) if month else (None, None)
    rows = await donations.list_for_user(user.id, category=category, start=start, end=end)
    return UserDonationsResponse(
        user=UserDonationsRead(
            discord_id=discord_id,
            total_donated=sum(d.amount for d in rows),
            donation_count=len(rows),
            donations=[DonationRead.model_validate(d) for d in rows],
        ),
        filters={"month": month, "category": category or "all"},
    )


@router.post(
    "",
    response_model=ApiResponse[DonationRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Donation",
    description="Record a donation. Completed donations are announced on the Discord webhook.",
    responses={404: {"description": "User not found"}},
)
async def create_donation(
    body: DonationCreate,
    background_tasks: BackgroundTasks,
    users: UserRepoDep,
    donations: DonationRepoDep,
    cache: RankingCacheDep,
    webhook: DiscordWebhookClientDep,
):
    """
    Create a donation.

    - **amount**: Donated sats.
    - **status**: pending (default), completed or failed.
    - **date**: YYYY-MM-DD, defaults to today (UTC).
    - **note**: Free text; the deprecated **message** is used when note is empty.
    """
    user = await users.require_by_discord_id(body.discord_id)
    donation = Donation(
        user_id=user.id,
        amount=body.amount,
        currency=body.currency,
        donation_mode=body.donation_mode,
        donation_scope=body.donation_scope,
        note=body.note or body.message or None,
        plan_text=body.plan_text,
        duration_minutes=body.duration_minutes,
        duration_seconds=body.duration_seconds,
        goal_minutes=body.goal_minutes,
        achievement_rate=body.achievement_rate,
        photo_url=body.photo_url,
        accumulated_sats=body.accumulated_sats,
        total_accumulated_sats=body.total_accumulated_sats,
        total_donated_sats=body.total_donated_sats,
        transaction_id=body.transaction_id,
        status=body.status.value,
        date=body.date or utc_now().date().isoformat(),
        session_id=body.session_id,
        message=body.message,
    )
    donation = await donations.create(donation)
    logger.info(f"Donation created: id={donation.id}, amount={donation.amount}, status={donation.status}")

    cache.invalidate_category(donation.donation_mode)

    if donation.status == DonationStatus.COMPLETED.value:
        totals = await donations.totals(user_id=user.id)
        background_tasks.add_task(
            notify_donation,
            webhook,
            username=user.discord_username,
            discord_id=user.discord_id,
            amount=donation.amount,
            donation_mode=donation.donation_mode,
            total_donated=totals.total_amount,
            note=donation.note,
        )

    return ApiResponse(data=DonationRead.model_validate(donation))
