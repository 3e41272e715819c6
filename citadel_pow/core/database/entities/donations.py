"""
Donation entity models.

A donation row snapshots the POW context (plan, durations, balances) at the
moment the user donated, so later edits to sessions do not rewrite history.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class DonationStatus(str, Enum):
    """Lifecycle of a donation payment."""

    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Donation(Base, table=True):
    """Satoshi donation.

    Table: donations
    """

    __tablename__ = "donations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)

    amount: int
    currency: str = Field(default="SAT", max_length=10)
    donation_mode: str = Field(default="pow-writing", max_length=50, index=True)
    donation_scope: str = Field(default="session", max_length=20)
    note: Optional[str] = Field(default=None)

    # POW snapshot at donation time
    plan_text: Optional[str] = Field(default=None)
    duration_minutes: Optional[int] = Field(default=None)
    duration_seconds: Optional[int] = Field(default=None)
    goal_minutes: Optional[int] = Field(default=None)
    achievement_rate: Optional[float] = Field(default=None)
    photo_url: Optional[str] = Field(default=None)

    # Balance snapshot at donation time
    accumulated_sats: Optional[int] = Field(default=None)
    total_accumulated_sats: Optional[int] = Field(default=None)
    total_donated_sats: Optional[int] = Field(default=None)

    # Payment
    transaction_id: Optional[str] = Field(default=None, index=True)
    status: str = Field(default=DonationStatus.PENDING.value, max_length=20, index=True)
    date: str = Field(max_length=10)
    session_id: Optional[str] = Field(default=None, max_length=36)
    message: Optional[str] = Field(default=None)
    paid_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    discord_shared: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"Donation(id={self.id}, user_id={self.user_id}, amount={self.amount}, status={self.status})"
