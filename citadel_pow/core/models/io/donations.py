"""
Donation I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DonationCreateStatus(str, Enum):
    """Statuses a client may create a donation with."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class DonationRead(BaseModel):
    """Schema for reading a donation from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: int
    currency: str
    donation_mode: str
    donation_scope: str
    note: Optional[str] = None
    plan_text: Optional[str] = None
    duration_minutes: Optional[int] = None
    duration_seconds: Optional[int] = None
    goal_minutes: Optional[int] = None
    achievement_rate: Optional[float] = None
    photo_url: Optional[str] = None
    accumulated_sats: Optional[int] = None
    total_accumulated_sats: Optional[int] = None
    total_donated_sats: Optional[int] = None
    transaction_id: Optional[str] = None
    status: str
    date: str
    session_id: Optional[str] = None
    message: Optional[str] = None
    paid_at: Optional[datetime] = None
    discord_shared: bool = False
    created_at: datetime


class DonationCreate(BaseModel):
    """Schema for creating a donation via API."""

    discord_id: str = Field(min_length=1)
    amount: int = Field(gt=0, description="Donated sats")
    currency: str = "SAT"
    donation_mode: str = Field(default="pow-writing", description="POW category the donation belongs to")
    donation_scope: str = "session"
    note: Optional[str] = None

    plan_text: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    goal_minutes: Optional[int] = Field(default=None, ge=0)
    achievement_rate: Optional[float] = Field(default=None, ge=0, le=200)
    photo_url: Optional[str] = None

    accumulated_sats: Optional[int] = Field(default=None, ge=0)
    total_accumulated_sats: Optional[int] = Field(default=None, ge=0)
    total_donated_sats: Optional[int] = Field(default=None, ge=0)

    transaction_id: Optional[str] = None
    status: DonationCreateStatus = DonationCreateStatus.PENDING
    date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$", examples=["2026-01-15"])
    session_id: Optional[str] = None
    message: Optional[str] = Field(default=None, description="Deprecated, use note")


class TopDonorRead(BaseModel):
    discord_id: str
    discord_username: str
    discord_avatar: Optional[str] = None
    total_donated: int
    donation_count: int
    last_donation_at: Optional[datetime] = None


class TopDonorsResponse(BaseModel):
    success: bool = True
    data: List[TopDonorRead]
    count: int
    category: str


class RecentDonationRead(DonationRead):
    discord_username: str
    discord_avatar: Optional[str] = None


class DonationStatsRead(BaseModel):
    total_amount: int
    total_donations: int
    average_donation: float


class UserDonationsRead(BaseModel):
    discord_id: str
    total_donated: int
    donation_count: int
    donations: List[DonationRead]


class UserDonationsResponse(BaseModel):
    success: bool = True
    user: UserDonationsRead
    filters: dict
