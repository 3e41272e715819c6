"""
Discord webhook notifications, run as FastAPI background tasks.

A notification failure is logged and never reaches the request that
triggered it.
"""

from __future__ import annotations

from typing import Optional, Sequence

from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.monitoring import log_error
from citadel_pow.integrations.discord import (
    DiscordApiError,
    DiscordWebhookClient,
    MeetupDonor,
    send_donation_notification,
    send_meetup_donation_notification,
)

logger = get_logger(__name__)


async def notify_donation(
    client: Optional[DiscordWebhookClient],
    *,
    username: str,
    discord_id: str,
    amount: int,
    donation_mode: str,
    total_donated: int,
    note: Optional[str] = None,
) -> None:
    if client is None:
        logger.debug("Discord webhook not configured, skipping donation notification")
        return
    try:
        await send_donation_notification(
            client,
            username=username,
            discord_id=discord_id,
            amount=amount,
            donation_mode=donation_mode,
            total_donated=total_donated,
            note=note,
        )
        logger.info(f"Donation notification sent for {discord_id}")
    except DiscordApiError as e:
        logger.error(f"Failed to send donation notification: {e}")
        log_error("DiscordApiError", str(e), {"discord_id": discord_id})


async def notify_meetup_donation(
    client: Optional[DiscordWebhookClient],
    *,
    meetup_title: str,
    participants: Sequence[MeetupDonor],
    total_amount: int,
) -> None:
    if client is None:
        logger.debug("Discord webhook not configured, skipping meetup notification")
        return
    try:
        await send_meetup_donation_notification(
            client, meetup_title=meetup_title, participants=participants, total_amount=total_amount
        )
        logger.info(f"Meetup donation notification sent: {meetup_title}")
    except DiscordApiError as e:
        logger.error(f"Failed to send meetup donation notification: {e}")
        log_error("DiscordApiError", str(e), {"meetup_title": meetup_title})
