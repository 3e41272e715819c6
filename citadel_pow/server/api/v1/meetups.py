"""
Group Meetup API Endpoints.

Organizers schedule group POW meetups. Participants join with a pledge,
check in at the venue by scanning the organizer's time-limited QR code,
and complete their donation afterwards. When every checked-in participant
has donated, the group donation is announced on the Discord webhook.
"""

from typing import List, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, status

from citadel_pow.core.database import utc_now
from citadel_pow.core.database.entities import (
    Donation,
    DonationStatus,
    GroupMeetup,
    MeetupStatus,
    ParticipantDonationStatus,
    User,
)
from citadel_pow.core.database.repositories import MeetupRepository, ParticipantStats, UserRepository
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiListResponse,
    ApiResponse,
    CheckInResult,
    MeetupCheckIn,
    MeetupCreate,
    MeetupDetails,
    MeetupDonationComplete,
    MeetupDonationResult,
    MeetupJoin,
    MeetupJoinResult,
    MeetupMember,
    MeetupRead,
    MeetupStatusUpdate,
    MeetupSummary,
    OrganizerRead,
    ParticipantRead,
    PendingMeetupDonation,
    QRCodeRead,
    SuccessResponse,
)
from citadel_pow.integrations.discord import MeetupDonor
from citadel_pow.server.core.config import settings
from citadel_pow.server.services.deps import (
    DiscordWebhookClientDep,
    DonationRepoDep,
    MeetupRepoDep,
    RankingCacheDep,
    UserRepoDep,
)
from citadel_pow.server.services.notifications import notify_meetup_donation
from citadel_pow.server.services.organizers import has_organizer_role
from citadel_pow.server.services.qr_checkin import QRCodeError, generate_qr_code, verify_qr_code

logger = get_logger(__name__)
router = APIRouter()

JOINABLE_STATUSES = (MeetupStatus.SCHEDULED.value, MeetupStatus.IN_PROGRESS.value)


async def _require_meetup(meetups: MeetupRepository, meetup_id: str) -> GroupMeetup:
    meetup = await meetups.get_by_id(meetup_id)
    if meetup is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meetup not found")
    return meetup


async def _require_organizer(
    meetups: MeetupRepository, users: UserRepository, meetup_id: str, discord_id: str, detail: str
) -> Tuple[GroupMeetup, User]:
    """The meetup and its organizer; 403 unless ``discord_id`` organizes it."""
    meetup = await _require_meetup(meetups, meetup_id)
    user = await users.get_by_discord_id(discord_id)
    if user is None or user.id != meetup.organizer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return meetup, user


@router.post(
    "",
    response_model=ApiResponse[MeetupRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Meetup",
    description="Schedule a group meetup. Only organizers may create meetups.",
    responses={403: {"description": "Not an organizer"}, 404: {"description": "User not found"}},
)
async def create_meetup(body: MeetupCreate, users: UserRepoDep, meetups: MeetupRepoDep):
    """
    Create a meetup.

    - **discord_id**: The organizer; must be listed in ORGANIZER_DISCORD_IDS
      (an empty list allows everyone).
    - **scheduled_at**: Start time (ISO 8601).
    - **target_donation_amount**: Group donation goal in sats.
    """
    user = await users.require_by_discord_id(body.discord_id)
    if not has_organizer_role(body.discord_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only Organizers can create meet-ups")
    meetup = await meetups.create(
        GroupMeetup(
            organizer_id=user.id,
            title=body.title,
            description=body.description,
            image_url=body.image_url,
            donation_mode=body.donation_mode,
            scheduled_at=body.scheduled_at,
            duration_minutes=body.duration_minutes,
            target_donation_amount=body.target_donation_amount,
            status=MeetupStatus.SCHEDULED.value,
        )
    )
    logger.info(f"Meetup created: id={meetup.id}, organizer={body.discord_id}")
    return ApiResponse(data=MeetupRead.model_validate(meetup))


@router.get(
    "",
    response_model=ApiListResponse[MeetupSummary],
    summary="List Meetups",
    description="Meetups with organizer and participant totals, latest scheduled first.",
)
async def list_meetups(
    meetups: MeetupRepoDep,
    status_filter: str = Query(default="all", alias="status", description="Meetup status or 'all'"),
    limit: int = Query(default=20, ge=1, le=100),
):
    rows = await meetups.list_with_organizers(status=status_filter, limit=limit)
    stats = await meetups.stats_by_meetup([meetup.id for meetup, _ in rows])
    data = []
    for meetup, organizer in rows:
        totals = stats.get(meetup.id, ParticipantStats())
        data.append(
            MeetupSummary(
                id=meetup.id,
                title=meetup.title,
                description=meetup.description,
                image_url=meetup.image_url,
                donation_mode=meetup.donation_mode,
                scheduled_at=meetup.scheduled_at,
                duration_minutes=meetup.duration_minutes,
                target_donation_amount=meetup.target_donation_amount,
                status=meetup.status,
                created_at=meetup.created_at,
                organizer=OrganizerRead.model_validate(organizer),
                participant_count=totals.participant_count,
                total_pledged=totals.total_pledged,
                attended_count=totals.attended_count,
                total_donated=totals.total_donated,
            )
        )
    return ApiListResponse(data=data, count=len(data))


@router.get(
    "/my-pending-donations",
    response_model=ApiResponse[List[PendingMeetupDonation]],
    summary="My Pending Meetup Donations",
    description="Meetups the user checked in to but has not donated for yet.",
    responses={400: {"description": "discord_id missing"}, 404: {"description": "User not found"}},
)
async def my_pending_donations(
    users: UserRepoDep,
    meetups: MeetupRepoDep,
    discord_id: Optional[str] = Query(default=None),
):
    if not discord_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="discord_id is required")
    user = await users.require_by_discord_id(discord_id)
    rows = await meetups.pending_donations(user.id)
    return ApiResponse(
        data=[
            PendingMeetupDonation(
                meetup_id=meetup.id,
                title=meetup.title,
                image_url=meetup.image_url,
                pledged_amount=participant.pledged_amount,
                attended=participant.attended,
                completed_at=meetup.completed_at,
            )
            for participant, meetup in rows
        ]
    )


@router.get(
    "/{meetup_id}",
    response_model=ApiResponse[MeetupDetails],
    summary="Get Meetup",
    description="A meetup with organizer, participants and totals.",
    responses={404: {"description": "Meetup not found"}},
)
async def get_meetup(meetup_id: str, meetups: MeetupRepoDep):
    found = await meetups.get_with_organizer(meetup_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meetup not found")
    meetup, organizer = found

    totals = ParticipantStats()
    participants = []
    for participant, user in await meetups.participants_with_users(meetup_id):
        totals.include(participant)
        participants.append(
            ParticipantRead(
                user_id=participant.user_id,
                discord_username=user.discord_username,
                discord_avatar=user.discord_avatar,
                pledged_amount=participant.pledged_amount,
                attended=participant.attended,
                donation_status=participant.donation_status,
                actual_donated_amount=participant.actual_donated_amount,
                joined_at=participant.joined_at,
            )
        )

    return ApiResponse(
        data=MeetupDetails(
            **MeetupRead.model_validate(meetup).model_dump(),
            organizer=OrganizerRead.model_validate(organizer),
            participants=participants,
            participant_count=totals.participant_count,
            total_pledged=totals.total_pledged,
            attended_count=totals.attended_count,
            total_donated=totals.total_donated,
        )
    )


@router.post(
    "/{meetup_id}/join",
    response_model=ApiResponse[MeetupJoinResult],
    summary="Join Meetup",
    description="Join a scheduled or running meetup with a pledged amount.",
    responses={
        400: {"description": "Meetup not joinable, or already joined"},
        404: {"description": "User or meetup not found"},
    },
)
async def join_meetup(meetup_id: str, body: MeetupJoin, users: UserRepoDep, meetups: MeetupRepoDep):
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    meetup = await _require_meetup(meetups, meetup_id)
    if meetup.status not in JOINABLE_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot join this meetup")
    participant = await meetups.add_participant(meetup_id, user_id, body.pledged_amount)
    logger.info(f"{body.discord_id} joined meetup {meetup_id} pledging {body.pledged_amount} sats")
    return ApiResponse(data=MeetupJoinResult(participant_id=participant.id, meetup_id=meetup_id))


@router.post(
    "/{meetup_id}/leave",
    response_model=SuccessResponse,
    summary="Leave Meetup",
    responses={404: {"description": "User not found"}},
)
async def leave_meetup(meetup_id: str, body: MeetupMember, users: UserRepoDep, meetups: MeetupRepoDep):
    user = await users.require_by_discord_id(body.discord_id)
    if await meetups.remove_participant(meetup_id, user.id):
        logger.info(f"{body.discord_id} left meetup {meetup_id}")
    return SuccessResponse()


@router.post(
    "/{meetup_id}/generate-qr",
    response_model=ApiResponse[QRCodeRead],
    summary="Generate Check-in QR Code",
    description="Issue a time-limited check-in code for the meetup. Organizer only.",
    responses={403: {"description": "Not the organizer"}, 404: {"description": "Meetup not found"}},
)
async def generate_qr(meetup_id: str, body: MeetupMember, users: UserRepoDep, meetups: MeetupRepoDep):
    meetup, _ = await _require_organizer(
        meetups, users, meetup_id, body.discord_id, "Only organizer can generate QR code"
    )
    config = settings.meetup
    qr = generate_qr_code(
        meetup_id,
        secret=config.qr_secret,
        ttl_seconds=config.qr_ttl_seconds,
        image_service_url=config.qr_image_url,
    )
    meetup.qr_code_url = qr.image_url
    meetup.qr_code_data = qr.data
    meetup.qr_code_expires_at = qr.expires_at
    meetup.updated_at = utc_now()
    await meetups.update(meetup)
    logger.info(f"QR code generated for meetup {meetup_id}, expires {qr.expires_at.isoformat()}")
    return ApiResponse(data=QRCodeRead(qr_code_url=qr.image_url, qr_data=qr.data, expires_at=qr.expires_at))


@router.post(
    "/{meetup_id}/check-in",
    response_model=ApiResponse[CheckInResult],
    summary="Check In",
    description="Mark a participant as attended after scanning the meetup QR code.",
    responses={
        400: {"description": "Invalid or expired QR code, not a participant, or already checked in"},
        404: {"description": "User not found"},
    },
)
async def check_in(meetup_id: str, body: MeetupCheckIn, users: UserRepoDep, meetups: MeetupRepoDep):
    """
    Check in to a meetup.

    - **qr_data**: ``meetup:{meetup_id}:{unix_ts}:{checksum}`` as shown by
      the organizer; rejected when malformed, expired, forged or issued for
      another meetup.
    """
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    config = settings.meetup
    scanned_meetup_id = verify_qr_code(body.qr_data, secret=config.qr_secret, ttl_seconds=config.qr_ttl_seconds)
    if scanned_meetup_id != meetup_id:
        raise QRCodeError("QR code does not match this meetup")

    participant = await meetups.get_participant(meetup_id, user_id)
    if participant is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not a participant of this meetup")
    if participant.attended:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already checked in")

    now = utc_now()
    participant.attended = True
    participant.attended_at = now
    await meetups.save_participant(participant)
    logger.info(f"{body.discord_id} checked in to meetup {meetup_id}")
    return ApiResponse(data=CheckInResult(attended=True, attended_at=now))


@router.post(
    "/{meetup_id}/update-status",
    response_model=SuccessResponse,
    summary="Update Meetup Status",
    description="Move a meetup to in_progress, completed or cancelled. Organizer only.",
    responses={403: {"description": "Not the organizer"}, 404: {"description": "Meetup not found"}},
)
async def update_status(meetup_id: str, body: MeetupStatusUpdate, users: UserRepoDep, meetups: MeetupRepoDep):
    meetup, _ = await _require_organizer(
        meetups, users, meetup_id, body.discord_id, "Only organizer can update status"
    )
    await meetups.set_status(meetup, body.status.value)
    logger.info(f"Meetup {meetup_id} status -> {body.status.value}")
    return SuccessResponse()


@router.post(
    "/{meetup_id}/complete-donation",
    response_model=ApiResponse[MeetupDonationResult],
    summary="Complete Meetup Donation",
    description="Record a checked-in participant's donation for the meetup.",
    responses={
        400: {"description": "Not a participant, not checked in, or already donated"},
        404: {"description": "User or meetup not found"},
    },
)
async def complete_donation(
    meetup_id: str,
    body: MeetupDonationComplete,
    background_tasks: BackgroundTasks,
    users: UserRepoDep,
    meetups: MeetupRepoDep,
    donations: DonationRepoDep,
    cache: RankingCacheDep,
    webhook: DiscordWebhookClientDep,
):
    """
    Complete a meetup donation.

    Creates a completed SAT donation with scope ``meetup`` and links it to
    the participant. Once every checked-in participant has donated, the
    group donation is announced on the Discord webhook.
    """
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    participant = await meetups.get_participant(meetup_id, user_id)
    if participant is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not a participant of this meetup")
    if not participant.attended:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Must check in before donating")
    if participant.donation_status == ParticipantDonationStatus.COMPLETED.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already donated")
    meetup = await _require_meetup(meetups, meetup_id)

    donation = await donations.create(
        Donation(
            user_id=user_id,
            amount=body.amount,
            currency="SAT",
            donation_mode=meetup.donation_mode,
            donation_scope="meetup",
            note=f"Group meetup: {meetup.title}",
            status=DonationStatus.COMPLETED.value,
            date=utc_now().date().isoformat(),
        )
    )
    donation_id = donation.id

    participant.donation_status = ParticipantDonationStatus.COMPLETED.value
    participant.actual_donated_amount = body.amount
    participant.donated_at = utc_now()
    participant.donation_id = donation_id
    await meetups.save_participant(participant)
    logger.info(f"Meetup donation completed: meetup={meetup_id}, user={body.discord_id}, amount={body.amount}")

    cache.invalidate_category(meetup.donation_mode)

    attended = [(p, u) for p, u in await meetups.participants_with_users(meetup_id) if p.attended]
    if attended and all(p.donation_status == ParticipantDonationStatus.COMPLETED.value for p, _ in attended):
        donors = [
            MeetupDonor(
                discord_id=u.discord_id,
                discord_username=u.discord_username,
                donated_amount=p.actual_donated_amount,
            )
            for p, u in attended
        ]
        background_tasks.add_task(
            notify_meetup_donation,
            webhook,
            meetup_title=meetup.title,
            participants=donors,
            total_amount=sum(d.donated_amount for d in donors),
        )

    return ApiResponse(data=MeetupDonationResult(donation_id=donation_id, meetup_id=meetup_id, amount=body.amount))
