"""Discord message DTO models.

Shapes follow the Discord REST/webhook wire schema; ``None`` fields are
dropped when the payload is serialized.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DiscordEmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class DiscordEmbedFooter(BaseModel):
    text: str
    icon_url: Optional[str] = None


class DiscordEmbed(BaseModel):
    """Rich embed attached to a message."""

    title: Optional[str] = None
    description: Optional[str] = None
    color: Optional[int] = None
    fields: List[DiscordEmbedField] = Field(default_factory=list)
    footer: Optional[DiscordEmbedFooter] = None
    timestamp: Optional[str] = None


class DiscordWebhookMessage(BaseModel):
    """Payload POSTed to an incoming webhook URL."""

    content: Optional[str] = None
    embeds: List[DiscordEmbed] = Field(default_factory=list)
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DiscordMessage(BaseModel):
    """Subset of the message object returned by ``POST /channels/{id}/messages``."""

    id: str
    channel_id: Optional[str] = None
    content: Optional[str] = None

    model_config = {"extra": "allow"}
