"""
User I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from citadel_pow.core.database.entities.users import DonationScope


class UserRead(BaseModel):
    """Schema for reading a user from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    discord_id: str = Field(description="Discord user id")
    discord_username: str = Field(description="Discord display name")
    discord_avatar: Optional[str] = Field(default=None, description="Discord avatar URL or hash")
    donation_scope: str = Field(description="When accumulated sats are donated (session or total)")
    created_at: datetime
    updated_at: datetime


class UserUpsert(BaseModel):
    """Schema for creating or refreshing a user via API."""

    discord_id: str = Field(min_length=1, description="Discord user id", examples=["123456789012345678"])
    discord_username: str = Field(min_length=1, description="Discord display name", examples=["satoshi"])
    discord_avatar: Optional[str] = Field(default=None, description="Discord avatar URL or hash")


class UserSettingsUpdate(BaseModel):
    """Schema for updating user settings via API."""

    donation_scope: Optional[DonationScope] = Field(default=None, description="session or total")


class UserStats(BaseModel):
    """Aggregated profile statistics of a user."""

    user: UserRead
    current_rank: Optional[int] = Field(default=None, description="Rank of the most recent ranking row")
    current_score: float = Field(default=0, description="POW score of the most recent ranking row")
    total_donated_sats: int = Field(description="Sum of completed SAT donations")
    total_donated: int = Field(description="Same as total_donated_sats, kept for older clients")
    donation_count: int
    post_count: int
    total_engagement: int = Field(description="Sum of the user's Discord post reactions")
