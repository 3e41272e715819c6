"""
Discord post I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class DiscordPostRead(BaseModel):
    """Schema for reading a Discord post from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    message_id: str
    channel_id: str
    user_id: str
    session_id: Optional[str] = None
    photo_url: Optional[str] = None
    plan_text: Optional[str] = None
    donation_mode: Optional[str] = None
    reaction_count: int = 0
    reactions: Dict[str, int] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class PostAuthor(BaseModel):
    discord_username: str
    discord_avatar: Optional[str] = None


class DiscordPostWithAuthor(DiscordPostRead):
    users: PostAuthor


class PopularPostRead(BaseModel):
    """A post with its author and the session it was shared from."""

    id: str
    message_id: str
    channel_id: str
    user_id: str
    session_id: Optional[str] = None
    photo_url: Optional[str] = None
    plan_text: Optional[str] = None
    donation_mode: Optional[str] = None
    reaction_count: int
    reactions: Dict[str, int] = Field(default_factory=dict)
    created_at: datetime
    discord_id: str
    discord_username: str
    discord_avatar: Optional[str] = None
    duration_minutes: Optional[int] = None
    duration_seconds: Optional[int] = None
    goal_minutes: Optional[int] = None
    achievement_rate: Optional[float] = None


class DiscordShareRequest(BaseModel):
    """Schema for sharing a POW card to the Discord channel."""

    discord_id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    photo_url: str = Field(description="PNG card as base64 or a data URL")
    plan_text: str
    donation_mode: str = Field(description="POW category, e.g. pow-writing")
    duration_seconds: int = Field(ge=0)
    donation_scope: Optional[str] = Field(default=None, description="session, total or anything else for a payout")
    donation_sats: Optional[int] = None
    total_donated_sats: Optional[int] = None
    total_accumulated_sats: Optional[int] = None


class DiscordShareResponse(BaseModel):
    success: bool = True
    message_id: str
    channel_id: str


class DiscordPostCreate(BaseModel):
    """Schema for registering a post created by the Discord bot."""

    message_id: str = Field(min_length=1)
    channel_id: str = Field(min_length=1)
    discord_id: str = Field(min_length=1)
    session_id: Optional[str] = None
    photo_url: Optional[str] = None
    plan_text: Optional[str] = None
    donation_mode: Optional[str] = None


class ReactionsUpdate(BaseModel):
    """Schema for syncing a post's reaction counters."""

    message_id: str = Field(min_length=1)
    reaction_count: int = Field(ge=0)
    reactions: Optional[Dict[str, int]] = Field(default=None, examples=[{"👍": 5, "❤️": 3}])
