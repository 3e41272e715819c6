"""
Group meetup I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import to_naive_utc


class MeetupStatusUpdateValue(str, Enum):
    """Statuses an organizer may move a meetup to."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrganizerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    discord_id: str
    discord_username: str
    discord_avatar: Optional[str] = None


class MeetupCreate(BaseModel):
    """Schema for creating a meetup via API."""

    discord_id: str = Field(min_length=1, description="Organizer Discord id")
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    donation_mode: str = "pow-writing"
    scheduled_at: datetime
    duration_minutes: int = Field(gt=0)
    target_donation_amount: int = Field(gt=0)

    @field_validator("scheduled_at")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class MeetupRead(BaseModel):
    """Schema for reading a meetup from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organizer_id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    donation_mode: str
    scheduled_at: datetime
    duration_minutes: int
    target_donation_amount: int
    status: str
    qr_code_url: Optional[str] = None
    qr_code_data: Optional[str] = None
    qr_code_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class MeetupSummary(BaseModel):
    """A meetup listing entry with participant aggregates."""

    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    donation_mode: str
    scheduled_at: datetime
    duration_minutes: int
    target_donation_amount: int
    status: str
    created_at: datetime
    organizer: OrganizerRead
    participant_count: int
    total_pledged: int
    attended_count: int
    total_donated: int


class ParticipantRead(BaseModel):
    user_id: str
    discord_username: str
    discord_avatar: Optional[str] = None
    pledged_amount: int
    attended: bool
    donation_status: str
    actual_donated_amount: int
    joined_at: datetime


class MeetupDetails(MeetupRead):
    organizer: OrganizerRead
    participants: List[ParticipantRead]
    participant_count: int
    total_pledged: int
    attended_count: int
    total_donated: int


class PendingMeetupDonation(BaseModel):
    meetup_id: str
    title: str
    image_url: Optional[str] = None
    pledged_amount: int
    attended: bool
    completed_at: Optional[datetime] = None


class MeetupJoin(BaseModel):
    discord_id: str = Field(min_length=1)
    pledged_amount: int = Field(gt=0)


class MeetupJoinResult(BaseModel):
    participant_id: str
    meetup_id: str


class MeetupMember(BaseModel):
    """Body of requests that only identify the caller."""

    discord_id: str = Field(min_length=1)


class QRCodeRead(BaseModel):
    qr_code_url: str
    qr_data: str
    expires_at: datetime


class MeetupCheckIn(BaseModel):
    discord_id: str = Field(min_length=1)
    qr_data: str = Field(min_length=1, examples=["meetup:3f2c...:1767225600:a1b2c3d4"])


class CheckInResult(BaseModel):
    attended: bool = True
    attended_at: datetime


class MeetupStatusUpdate(BaseModel):
    discord_id: str = Field(min_length=1)
    status: MeetupStatusUpdateValue


class MeetupDonationComplete(BaseModel):
    discord_id: str = Field(min_length=1)
    amount: int = Field(gt=0)


class MeetupDonationResult(BaseModel):
    donation_id: str
    meetup_id: str
    amount: int
