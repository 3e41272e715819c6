"""
Study session entity models.

Study sessions are the legacy record of a completed POW activity. Unlike
POW sessions they persist the achievement rate reported by the client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class StudySession(Base, table=True):
    """Completed study session.

    Table: study_sessions
    """

    __tablename__ = "study_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)

    donation_mode: str = Field(default="pow-writing", max_length=50, index=True)
    plan_text: str = Field(default="")

    start_time: datetime = Field(sa_type=DateTime())
    end_time: datetime = Field(sa_type=DateTime())
    duration_minutes: int = Field(default=0)
    duration_seconds: Optional[int] = Field(default=0, nullable=True)
    goal_minutes: int = Field(default=0)
    goal_seconds: int = Field(default=0)
    achievement_rate: float = Field(default=0)

    photo_url: Optional[str] = Field(default=None)
    donation_id: Optional[str] = Field(default=None, max_length=36)
    discord_message_id: Optional[str] = Field(default=None, max_length=50, index=True)
    reaction_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"StudySession(id={self.id}, user_id={self.user_id}, duration_seconds={self.duration_seconds})"
