"""Discord bot and webhook integration."""

from .client import DiscordBotClient, DiscordWebhookClient
from .errors import DiscordApiError
from .models import DiscordEmbed, DiscordEmbedField, DiscordMessage, DiscordWebhookMessage
from .webhook import (
    MeetupDonor,
    build_donation_notification,
    build_meetup_donation_notification,
    create_simple_embed,
    format_mention,
    send_donation_notification,
    send_meetup_donation_notification,
)

__all__ = [
    "DiscordApiError",
    "DiscordBotClient",
    "DiscordEmbed",
    "DiscordEmbedField",
    "DiscordMessage",
    "DiscordWebhookClient",
    "DiscordWebhookMessage",
    "MeetupDonor",
    "build_donation_notification",
    "build_meetup_donation_notification",
    "create_simple_embed",
    "format_mention",
    "send_donation_notification",
    "send_meetup_donation_notification",
]
