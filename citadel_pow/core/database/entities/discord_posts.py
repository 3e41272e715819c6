"""
Discord post entity models.

A post is a POW card shared to the Discord channel. ``session_id`` may point
at either a study session or a POW session, so it carries no foreign key.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class DiscordPost(Base, table=True):
    """Shared POW card and its reaction counters.

    Table: discord_posts
    """

    __tablename__ = "discord_posts"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    message_id: str = Field(max_length=50, unique=True, index=True)
    channel_id: str = Field(max_length=50)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)
    session_id: Optional[str] = Field(default=None, max_length=36, index=True)

    photo_url: Optional[str] = Field(default=None)
    plan_text: Optional[str] = Field(default=None)
    donation_mode: Optional[str] = Field(default=None, max_length=50, index=True)

    reaction_count: int = Field(default=0, index=True)
    reactions: Dict[str, int] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime())
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime()
    )

    def __repr__(self) -> str:
        return f"DiscordPost(message_id={self.message_id}, reaction_count={self.reaction_count})"
