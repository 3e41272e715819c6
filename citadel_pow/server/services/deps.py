"""
Route Dependencies.

Repositories are bound to the request's database session. Outbound
clients are process-wide singletons created from settings on first use and
closed on shutdown; routes that need an unconfigured client answer 501.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.database import get_session
from citadel_pow.core.database.repositories import (
    AccumulatedSatsRepository,
    DiscordPostRepository,
    DonationRepository,
    MeetupRepository,
    PowSessionRepository,
    RankingRepository,
    StudySessionRepository,
    UserRepository,
)
from citadel_pow.integrations.blink import BlinkClient
from citadel_pow.integrations.discord import DiscordBotClient, DiscordWebhookClient
from citadel_pow.server.core.config import settings

from .ranking_cache import RankingCache, ranking_cache

SessionDep = Annotated[AsyncSession, Depends(get_session)]


# =====================================================================
# Repositories
# =====================================================================


def get_user_repository(session: SessionDep) -> UserRepository:
    return UserRepository(session)


def get_accumulated_sats_repository(session: SessionDep) -> AccumulatedSatsRepository:
    return AccumulatedSatsRepository(session)


def get_donation_repository(session: SessionDep) -> DonationRepository:
    return DonationRepository(session)


def get_pow_session_repository(session: SessionDep) -> PowSessionRepository:
    return PowSessionRepository(session)


def get_study_session_repository(session: SessionDep) -> StudySessionRepository:
    return StudySessionRepository(session)


def get_discord_post_repository(session: SessionDep) -> DiscordPostRepository:
    return DiscordPostRepository(session)


def get_ranking_repository(session: SessionDep) -> RankingRepository:
    return RankingRepository(session)


def get_meetup_repository(session: SessionDep) -> MeetupRepository:
    return MeetupRepository(session)


UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
AccumulatedSatsRepoDep = Annotated[AccumulatedSatsRepository, Depends(get_accumulated_sats_repository)]
DonationRepoDep = Annotated[DonationRepository, Depends(get_donation_repository)]
PowSessionRepoDep = Annotated[PowSessionRepository, Depends(get_pow_session_repository)]
StudySessionRepoDep = Annotated[StudySessionRepository, Depends(get_study_session_repository)]
DiscordPostRepoDep = Annotated[DiscordPostRepository, Depends(get_discord_post_repository)]
RankingRepoDep = Annotated[RankingRepository, Depends(get_ranking_repository)]
MeetupRepoDep = Annotated[MeetupRepository, Depends(get_meetup_repository)]


def get_ranking_cache() -> RankingCache:
    return ranking_cache


RankingCacheDep = Annotated[RankingCache, Depends(get_ranking_cache)]


# =====================================================================
# Outbound clients
# =====================================================================

_blink_client: Optional[BlinkClient] = None
_discord_bot_client: Optional[DiscordBotClient] = None
_discord_webhook_client: Optional[DiscordWebhookClient] = None


def get_blink_client() -> BlinkClient:
    global _blink_client
    blink = settings.blink
    if not blink.is_configured:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Blink API not configured")
    if _blink_client is None:
        _blink_client = BlinkClient(blink.endpoint, blink.api_key, default_memo=blink.default_memo)
    return _blink_client


def get_discord_bot_client() -> DiscordBotClient:
    global _discord_bot_client
    discord = settings.discord
    if not discord.can_share:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Discord configuration missing")
    if _discord_bot_client is None:
        _discord_bot_client = DiscordBotClient(discord.bot_token, base_url=discord.api_base_url)
    return _discord_bot_client


def get_pow_channel_id() -> str:
    channel_id = settings.discord.pow_channel_id
    if not channel_id:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Discord configuration missing")
    return channel_id


def get_discord_webhook_client() -> Optional[DiscordWebhookClient]:
    """Webhook client, or None when no webhook URL is configured."""
    global _discord_webhook_client
    webhook_url = settings.discord.webhook_url
    if not webhook_url:
        return None
    if _discord_webhook_client is None:
        _discord_webhook_client = DiscordWebhookClient(webhook_url)
    return _discord_webhook_client


BlinkClientDep = Annotated[BlinkClient, Depends(get_blink_client)]
DiscordBotClientDep = Annotated[DiscordBotClient, Depends(get_discord_bot_client)]
PowChannelDep = Annotated[str, Depends(get_pow_channel_id)]
DiscordWebhookClientDep = Annotated[Optional[DiscordWebhookClient], Depends(get_discord_webhook_client)]


async def close_clients() -> None:
    """Close every outbound client created so far."""
    global _blink_client, _discord_bot_client, _discord_webhook_client
    for client in (_blink_client, _discord_bot_client, _discord_webhook_client):
        if client is not None:
            await client.aclose()
    _blink_client = _discord_bot_client = _discord_webhook_client = None
