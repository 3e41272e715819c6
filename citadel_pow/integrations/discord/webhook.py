"""Discord webhook notification builders.

Helpers that turn donation events into embeds and send them through a
``DiscordWebhookClient``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from pydantic import BaseModel

from .client import DiscordWebhookClient
from .models import DiscordEmbed, DiscordEmbedField, DiscordWebhookMessage

BLURPLE = 0x5865F2
BITCOIN_YELLOW = 0xFEE75C
GREEN = 0x00D26A


class MeetupDonor(BaseModel):
    discord_id: str
    discord_username: str
    donated_amount: int


def format_mention(discord_id: str, username: str) -> str:
    return f"<@{discord_id}> ({username})"


def create_simple_embed(title: str, description: str, color: int = BLURPLE) -> DiscordEmbed:
    return DiscordEmbed(
        title=title,
        description=description,
        color=color,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def build_donation_notification(
    *,
    username: str,
    discord_id: str,
    amount: int,
    donation_mode: str,
    total_donated: int,
    note: Optional[str] = None,
) -> DiscordWebhookMessage:
    """Embed announcing a single user's completed donation."""
    mention = format_mention(discord_id, username)
    note_text = f'\n\n💭 "{note}"' if note else ""
    description = (
        f"{mention}님께서 **{donation_mode}**에서 POW 완료 후, **{amount} sats** 기부 완료!"
        f"{note_text}\n\n누적 기부: {total_donated} sats"
    )
    return DiscordWebhookMessage(embeds=[create_simple_embed("⚡ POW 기부 완료", description, BITCOIN_YELLOW)])


def build_meetup_donation_notification(
    *, meetup_title: str, participants: Sequence[MeetupDonor], total_amount: int
) -> DiscordWebhookMessage:
    """Embed announcing that every attendee of a meetup has donated."""
    names = ", ".join(p.discord_username for p in participants)
    mentions = " ".join(f"<@{p.discord_id}>" for p in participants)
    embed = create_simple_embed(
        "🎉 그룹 POW Meet-up 기부 완료!",
        f"**{meetup_title}** 활동에 {len(participants)}명이 총 **{total_amount} sats**를 기부했습니다!\n\n{mentions}",
        GREEN,
    )
    embed.fields = [
        DiscordEmbedField(name="참여자", value=names, inline=False),
        DiscordEmbedField(name="총 기부액", value=f"{total_amount} sats", inline=True),
    ]
    return DiscordWebhookMessage(content="✨ 새로운 그룹 기부가 완료되었습니다!", embeds=[embed])


async def send_donation_notification(client: DiscordWebhookClient, **kwargs) -> None:
    await client.send(build_donation_notification(**kwargs))


async def send_meetup_donation_notification(client: DiscordWebhookClient, **kwargs) -> None:
    await client.send(build_meetup_donation_notification(**kwargs))
