"""
User entity models.

A user is identified externally by their Discord id; every other table
references the internal UUID ``users.id``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class DonationScope(str, Enum):
    """When a user's sats are donated."""

    SESSION = "session"
    TOTAL = "total"


class User(Base, table=True):
    """Discord-backed user account.

    Table: users
    """

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    discord_id: str = Field(max_length=64, unique=True, index=True)
    discord_username: str = Field(max_length=100)
    discord_avatar: Optional[str] = Field(default=None)
    donation_scope: str = Field(default=DonationScope.SESSION.value, max_length=20)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime()
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, discord_id={self.discord_id})"
