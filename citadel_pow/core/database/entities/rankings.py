"""
Weekly ranking entity models.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Ranking(Base, table=True):
    """A user's POW score and rank for one ISO week.

    Table: rankings
    """

    __tablename__ = "rankings"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)
    pow_score: float = Field(default=0)
    rank: int
    week_number: int = Field(index=True)
    year: int = Field(index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime()
    )

    def __repr__(self) -> str:
        return f"Ranking(user_id={self.user_id}, rank={self.rank}, week={self.year}-W{self.week_number})"
