"""
POW session entity models.

The achievement rate of a POW session is never stored; it is derived from
the duration and goal whenever a session is read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class PowSession(Base, table=True):
    """Completed POW session.

    Table: pow_sessions
    """

    __tablename__ = "pow_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)

    pow_fields: str = Field(default="pow-writing", max_length=50, index=True)
    pow_plan_text: str = Field(default="")

    start_time: datetime = Field(sa_type=DateTime())
    end_time: datetime = Field(sa_type=DateTime())
    duration_seconds: int = Field(default=0)
    duration_minutes: int = Field(default=0)
    goal_seconds: int = Field(default=0)
    goal_minutes: int = Field(default=0)

    photo_url: Optional[str] = Field(default=None)
    discord_message_id: Optional[str] = Field(default=None, max_length=50, index=True)
    reaction_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"PowSession(id={self.id}, user_id={self.user_id}, duration_seconds={self.duration_seconds})"
