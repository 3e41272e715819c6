"""
Discord Post API Endpoints.

Posts are POW cards in the Discord channel. They are created either by this
API (``/share`` uploads the card through the bot) or registered by the bot
itself; reaction counters are synced back by the bot and mirrored onto the
session the post was shared from.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from citadel_pow.core.database.entities import DiscordPost, PowSession
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.models.io import (
    ApiListResponse,
    ApiResponse,
    DiscordPostCreate,
    DiscordPostRead,
    DiscordPostWithAuthor,
    DiscordShareRequest,
    DiscordShareResponse,
    PopularPostRead,
    PostAuthor,
    ReactionsUpdate,
    SuccessResponse,
)
from citadel_pow.integrations.discord import DiscordApiError
from citadel_pow.server.services.deps import (
    DiscordBotClientDep,
    DiscordPostRepoDep,
    DonationRepoDep,
    PowChannelDep,
    PowSessionRepoDep,
    StudySessionRepoDep,
    UserRepoDep,
)
from citadel_pow.server.services.pow_metrics import achievement_rate
from citadel_pow.server.services.share_message import build_share_message, decode_card_image

logger = get_logger(__name__)
router = APIRouter()


async def _link_session(
    session_id: Optional[str],
    message_id: str,
    study_sessions: StudySessionRepoDep,
    pow_sessions: PowSessionRepoDep,
) -> None:
    if not session_id:
        return
    if not await study_sessions.set_discord_message_id(session_id, message_id):
        if not await pow_sessions.set_discord_message_id(session_id, message_id):
            logger.warning(f"Discord post {message_id} refers to unknown session {session_id}")


@router.get(
    "/popular",
    response_model=ApiListResponse[PopularPostRead],
    summary="Popular Posts",
    description="Posts with author and session details, most reactions first.",
)
async def popular_posts(
    posts: DiscordPostRepoDep,
    category: str = Query(default="all", description="donation_mode filter; 'all' disables it"),
    limit: int = Query(default=20, ge=1, le=100),
):
    data = []
    for item in await posts.popular(category=category, limit=limit):
        session = item.session
        rate: Optional[float] = None
        if isinstance(session, PowSession):
            rate = achievement_rate(
                duration_seconds=session.duration_seconds,
                duration_minutes=session.duration_minutes,
                goal_seconds=session.goal_seconds,
                goal_minutes=session.goal_minutes,
            )
        elif session is not None:
            rate = session.achievement_rate
        data.append(
            PopularPostRead(
                **DiscordPostRead.model_validate(item.post).model_dump(exclude={"updated_at"}),
                discord_id=item.user.discord_id,
                discord_username=item.user.discord_username,
                discord_avatar=item.user.discord_avatar,
                duration_minutes=session.duration_minutes if session else None,
                duration_seconds=session.duration_seconds if session else None,
                goal_minutes=session.goal_minutes if session else None,
                achievement_rate=rate,
            )
        )
    return ApiListResponse(data=data, count=len(data))


@router.post(
    "/share",
    response_model=DiscordShareResponse,
    summary="Share POW Card",
    description="Upload a POW card with its announcement to the POW channel and record the post.",
    responses={
        404: {"description": "User not found"},
        501: {"description": "Discord configuration missing"},
        502: {"description": "Discord rejected the message"},
    },
)
async def share_to_discord(
    body: DiscordShareRequest,
    users: UserRepoDep,
    donations: DonationRepoDep,
    posts: DiscordPostRepoDep,
    study_sessions: StudySessionRepoDep,
    pow_sessions: PowSessionRepoDep,
    bot: DiscordBotClientDep,
    channel_id: PowChannelDep,
):
    """
    Share a POW card.

    - **photo_url**: PNG card as base64, with or without a data URL prefix.
    - **donation_scope**: session (donated now), total (accumulated) or
      anything else (payout of accumulated sats); picks the announcement.
    - **donation_sats**: Sats of this POW.
    - **total_accumulated_sats**: Balance after accumulating, shown for total.
    """
    user = await users.require_by_discord_id(body.discord_id)
    user_id = user.id
    totals = await donations.totals()
    content = build_share_message(
        username=user.discord_username,
        donation_mode=body.donation_mode,
        duration_seconds=body.duration_seconds,
        plan_text=body.plan_text,
        donation_scope=body.donation_scope,
        donation_sats=body.donation_sats,
        total_accumulated_sats=body.total_accumulated_sats,
        current_beca=totals.total_amount,
    )
    image = decode_card_image(body.photo_url)

    try:
        message = await bot.send_image_message(channel_id, content, image)
    except DiscordApiError as e:
        logger.error(f"Failed to share POW card for {body.discord_id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send message to Discord")

    await posts.create(
        DiscordPost(
            message_id=message.id,
            channel_id=channel_id,
            user_id=user_id,
            session_id=body.session_id,
            photo_url=body.photo_url,
            plan_text=body.plan_text,
            donation_mode=body.donation_mode,
            reactions={},
        )
    )
    await _link_session(body.session_id, message.id, study_sessions, pow_sessions)
    logger.info(f"POW card shared: message_id={message.id}, session_id={body.session_id}")
    return DiscordShareResponse(message_id=message.id, channel_id=channel_id)


@router.post(
    "",
    response_model=ApiResponse[DiscordPostRead],
    status_code=status.HTTP_201_CREATED,
    summary="Register Discord Post",
    description="Record a post created by the Discord bot and link it to its session.",
    responses={404: {"description": "User not found"}},
)
async def create_post(
    body: DiscordPostCreate,
    users: UserRepoDep,
    posts: DiscordPostRepoDep,
    study_sessions: StudySessionRepoDep,
    pow_sessions: PowSessionRepoDep,
):
    user = await users.require_by_discord_id(body.discord_id)
    post = await posts.create(
        DiscordPost(
            message_id=body.message_id,
            channel_id=body.channel_id,
            user_id=user.id,
            session_id=body.session_id,
            photo_url=body.photo_url,
            plan_text=body.plan_text,
            donation_mode=body.donation_mode,
            reactions={},
        )
    )
    data = DiscordPostRead.model_validate(post)
    await _link_session(body.session_id, body.message_id, study_sessions, pow_sessions)
    return ApiResponse(data=data)


@router.put(
    "/reactions",
    response_model=ApiResponse[DiscordPostRead],
    summary="Update Reactions",
    description="Sync a post's reaction counters and copy the count onto its sessions.",
    responses={404: {"description": "Post not found"}},
)
async def update_reactions(
    body: ReactionsUpdate,
    posts: DiscordPostRepoDep,
    study_sessions: StudySessionRepoDep,
    pow_sessions: PowSessionRepoDep,
):
    post = await posts.get_by_message_id(body.message_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    post = await posts.update_reactions(post, body.reaction_count, body.reactions)
    data = DiscordPostRead.model_validate(post)
    await study_sessions.set_reaction_count(body.message_id, body.reaction_count)
    await pow_sessions.set_reaction_count(body.message_id, body.reaction_count)
    return ApiResponse(data=data)


@router.delete(
    "/{message_id}",
    response_model=SuccessResponse,
    summary="Delete Discord Post",
)
async def delete_post(message_id: str, posts: DiscordPostRepoDep):
    deleted = await posts.delete_by_message_id(message_id)
    if not deleted:
        logger.debug(f"Delete requested for unknown Discord post {message_id}")
    return SuccessResponse(message="Discord post deleted successfully")


@router.get(
    "/{message_id}",
    response_model=ApiResponse[DiscordPostWithAuthor],
    summary="Get Discord Post",
    responses={404: {"description": "Post not found"}},
)
async def get_post(message_id: str, posts: DiscordPostRepoDep):
    found = await posts.get_with_user(message_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    post, user = found
    return ApiResponse(
        data=DiscordPostWithAuthor(
            **DiscordPostRead.model_validate(post).model_dump(),
            users=PostAuthor(discord_username=user.discord_username, discord_avatar=user.discord_avatar),
        )
    )
