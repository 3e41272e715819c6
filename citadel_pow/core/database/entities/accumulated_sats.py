"""
Accumulated sats entity models.

``user_accumulated_sats`` holds one running balance per user. Every change
to it is appended to ``accumulated_sats_logs``; the log is the audit trail
used to validate balances.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class LedgerAction(str, Enum):
    """Direction of a balance change."""

    ADD = "add"
    DEDUCT = "deduct"


SESSION_UNIQUE_WHERE = "session_id IS NOT NULL AND action = 'add'"


class UserAccumulatedSats(Base, table=True):
    """Running accumulated sats balance of a user.

    Table: user_accumulated_sats
    """

    __tablename__ = "user_accumulated_sats"
    __table_args__ = (CheckConstraint("accumulated_sats >= 0", name="ck_user_accumulated_sats_non_negative"),)

    user_id: str = Field(foreign_key="users.id", primary_key=True, max_length=36)
    accumulated_sats: int = Field(default=0)
    last_updated: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"UserAccumulatedSats(user_id={self.user_id}, accumulated_sats={self.accumulated_sats})"


class AccumulatedSatsLog(Base, table=True):
    """Append-only record of a balance change.

    A session can credit a user at most once: the partial unique index on
    ``(user_id, session_id)`` rejects a second ``add`` for the same session.

    Table: accumulated_sats_logs
    """

    __tablename__ = "accumulated_sats_logs"
    __table_args__ = (
        Index(
            "idx_accumulated_sats_logs_session_unique",
            "user_id",
            "session_id",
            unique=True,
            postgresql_where=text(SESSION_UNIQUE_WHERE),
            sqlite_where=text(SESSION_UNIQUE_WHERE),
        ),
        CheckConstraint("action IN ('add', 'deduct')", name="ck_accumulated_sats_logs_action"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)
    amount_before: int
    amount_after: int
    change_amount: int
    action: str = Field(max_length=20)
    session_id: Optional[str] = Field(default=None, max_length=36)
    donation_id: Optional[str] = Field(default=None, max_length=36)
    note: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"AccumulatedSatsLog(id={self.id}, user_id={self.user_id}, change_amount={self.change_amount})"
