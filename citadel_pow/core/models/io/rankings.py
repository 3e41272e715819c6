"""
Ranking I/O models for API responses.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class RankingType(str, Enum):
    """What a category ranking is ordered by."""

    TIME = "time"
    DONATION = "donation"


class LeaderboardEntry(BaseModel):
    discord_username: str
    discord_avatar: Optional[str] = None
    pow_score: float
    rank: int
    week_number: int
    year: int
    updated_at: datetime


class LeaderboardResponse(BaseModel):
    success: bool = True
    data: List[LeaderboardEntry]
    count: int


class CurrentLeaderboardResponse(LeaderboardResponse):
    week: int = Field(description="ISO week number")
    year: int = Field(description="ISO year")


class _CategoryRankingEntry(BaseModel):
    rank: int
    discord_id: str
    discord_username: str
    discord_avatar: Optional[str] = None
    last_activity_at: Optional[datetime] = None


class TimeRankingEntry(_CategoryRankingEntry):
    total_seconds: int
    total_minutes: float = Field(description="total_seconds / 60, one decimal")
    session_count: int


class DonationRankingEntry(_CategoryRankingEntry):
    total_donations: int
    donation_count: int


class CategoryRankingResponse(BaseModel):
    success: bool = True
    type: RankingType
    category: str
    data: List[Union[TimeRankingEntry, DonationRankingEntry]]
    count: int
