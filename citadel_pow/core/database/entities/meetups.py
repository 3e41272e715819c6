"""
Group meetup entity models.

Organizers schedule meetups; participants pledge an amount, check in with
a QR code at the venue, and then complete their donation.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class MeetupStatus(str, Enum):
    """Lifecycle of a group meetup."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantDonationStatus(str, Enum):
    """Donation progress of a meetup participant."""

    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class GroupMeetup(Base, table=True):
    """Group POW meetup.

    Table: group_meetups
    """

    __tablename__ = "group_meetups"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_group_meetups_duration_positive"),
        CheckConstraint("target_donation_amount > 0", name="ck_group_meetups_target_positive"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    organizer_id: str = Field(foreign_key="users.id", max_length=36, index=True)

    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    donation_mode: str = Field(default="pow-writing", max_length=50)

    scheduled_at: datetime = Field(index=True, sa_type=DateTime())
    duration_minutes: int
    target_donation_amount: int
    status: str = Field(default=MeetupStatus.SCHEDULED.value, max_length=20, index=True)

    qr_code_url: Optional[str] = Field(default=None)
    qr_code_data: Optional[str] = Field(default=None)
    qr_code_expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime())

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime()
    )
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"GroupMeetup(id={self.id}, title={self.title}, status={self.status})"


class MeetupParticipant(Base, table=True):
    """A user's participation in a meetup.

    Table: meetup_participants
    """

    __tablename__ = "meetup_participants"
    __table_args__ = (
        UniqueConstraint("meetup_id", "user_id", name="uq_meetup_participants_meetup_user"),
        CheckConstraint("pledged_amount > 0", name="ck_meetup_participants_pledge_positive"),
        CheckConstraint("actual_donated_amount >= 0", name="ck_meetup_participants_donated_non_negative"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    meetup_id: str = Field(foreign_key="group_meetups.id", max_length=36, index=True)
    user_id: str = Field(foreign_key="users.id", max_length=36, index=True)

    pledged_amount: int
    actual_donated_amount: int = Field(default=0)
    attended: bool = Field(default=False)
    attended_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    donation_status: str = Field(default=ParticipantDonationStatus.PENDING.value, max_length=20)
    donated_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    donation_id: Optional[str] = Field(default=None, max_length=36)

    joined_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())

    def __repr__(self) -> str:
        return f"MeetupParticipant(meetup_id={self.meetup_id}, user_id={self.user_id})"
