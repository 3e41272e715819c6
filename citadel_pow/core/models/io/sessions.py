"""
Study and POW session I/O models for API requests and responses.

POW sessions accept the legacy study-session field names (``donation_mode``,
``plan_text``) as aliases of ``pow_fields`` and ``pow_plan_text``. Their
``achievement_rate`` is always computed on read; a client-sent value is
accepted for compatibility and ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import to_naive_utc

SessionReadT = TypeVar("SessionReadT")


class _SessionTimes(BaseModel):
    start_time: datetime = Field(description="Session start (ISO 8601)")
    end_time: datetime = Field(description="Session end (ISO 8601)")

    @field_validator("start_time", "end_time")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class DiscordPostLink(BaseModel):
    """Discord post linked to a session."""

    model_config = ConfigDict(from_attributes=True)

    message_id: str
    channel_id: str
    photo_url: Optional[str] = None
    reaction_count: int = 0


# =====================================================================
# POW sessions
# =====================================================================


class PowSessionFields(_SessionTimes):
    pow_fields: Optional[str] = Field(default=None, description="POW category, e.g. pow-writing")
    pow_plan_text: Optional[str] = Field(default=None, description="What the user planned to do")
    duration_seconds: Optional[int] = Field(default=None, ge=0, description="Takes priority over duration_minutes")
    duration_minutes: Optional[int] = Field(default=None, ge=0, description="Deprecated, use duration_seconds")
    goal_seconds: Optional[int] = Field(default=None, ge=0, description="Takes priority over goal_minutes")
    goal_minutes: Optional[int] = Field(default=None, ge=0, description="Deprecated, use goal_seconds")
    photo_url: Optional[str] = None

    # Legacy study-session names
    donation_mode: Optional[str] = Field(default=None, description="Alias of pow_fields")
    plan_text: Optional[str] = Field(default=None, description="Alias of pow_plan_text")
    achievement_rate: Optional[float] = Field(default=None, ge=0, le=200, description="Ignored, computed on read")
    donation_id: Optional[str] = Field(default=None, description="Ignored")


class PowSessionCreate(PowSessionFields):
    """Schema for creating a POW session via API."""

    discord_id: str = Field(min_length=1)


class PowSessionBulkCreate(BaseModel):
    discord_id: str = Field(min_length=1)
    sessions: List[PowSessionFields]


class PowSessionRead(BaseModel):
    """Schema for reading a POW session from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    pow_fields: str
    pow_plan_text: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int
    duration_minutes: int
    goal_seconds: int
    goal_minutes: int
    achievement_rate: int = Field(description="Duration relative to goal, in percent (uncapped)")
    photo_url: Optional[str] = None
    discord_message_id: Optional[str] = None
    reaction_count: int = 0
    created_at: datetime
    discord_posts: List[DiscordPostLink] = Field(default_factory=list)


# =====================================================================
# Study sessions
# =====================================================================


class StudySessionCreate(_SessionTimes):
    """Schema for creating a study session via API."""

    discord_id: str = Field(min_length=1)
    donation_mode: str
    plan_text: str
    duration_seconds: Optional[int] = Field(default=None, ge=0, description="Takes priority over duration_minutes")
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    goal_minutes: int = Field(ge=0)
    achievement_rate: float = Field(ge=0, le=200)
    photo_url: Optional[str] = None
    donation_id: Optional[str] = None


class StudySessionBulkItem(_SessionTimes):
    donation_mode: str
    plan_text: str
    duration_minutes: int = Field(ge=0)
    goal_minutes: int = Field(ge=0)
    achievement_rate: float = Field(ge=0, le=200)
    photo_url: Optional[str] = None
    donation_id: Optional[str] = None


class StudySessionBulkCreate(BaseModel):
    discord_id: str = Field(min_length=1)
    sessions: List[StudySessionBulkItem]


class StudySessionRead(BaseModel):
    """Schema for reading a study session from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    donation_mode: str
    plan_text: str
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    duration_seconds: Optional[int]
    goal_minutes: int
    goal_seconds: int
    achievement_rate: float
    photo_url: Optional[str] = None
    donation_id: Optional[str] = None
    discord_message_id: Optional[str] = None
    reaction_count: int = 0
    created_at: datetime
    discord_posts: List[DiscordPostLink] = Field(default_factory=list)


# =====================================================================
# Shared read models
# =====================================================================


class SessionStatsRead(BaseModel):
    discord_id: str
    discord_username: str
    discord_avatar: Optional[str] = None
    total_sessions: int
    total_study_seconds: int
    total_study_minutes: int
    avg_session_minutes: float
    last_study_at: Optional[datetime] = None


class SessionListResponse(BaseModel, Generic[SessionReadT]):
    success: bool = True
    data: List[SessionReadT]
    count: int
    filters: Dict[str, Any]


class TodaySessionsResponse(BaseModel, Generic[SessionReadT]):
    success: bool = True
    data: List[SessionReadT]
    count: int
    total_minutes: int


class PowTodaySessionsResponse(TodaySessionsResponse[PowSessionRead]):
    total_seconds: int
