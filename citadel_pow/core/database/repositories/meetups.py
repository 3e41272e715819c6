"""
Group meetup repository.

Covers meetups, their participants and the participant aggregates shown
on meetup listings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.errors import AlreadyJoinedError

from ..base import utc_now
from ..entities.meetups import GroupMeetup, MeetupParticipant, MeetupStatus, ParticipantDonationStatus
from ..entities.users import User
from .base import AsyncBaseRepository


@dataclass
class ParticipantStats:
    participant_count: int = 0
    total_pledged: int = 0
    attended_count: int = 0
    total_donated: int = 0

    def include(self, participant: MeetupParticipant) -> None:
        self.participant_count += 1
        self.total_pledged += participant.pledged_amount or 0
        if participant.attended:
            self.attended_count += 1
        if participant.donation_status == ParticipantDonationStatus.COMPLETED.value:
            self.total_donated += participant.actual_donated_amount or 0


class MeetupRepository(AsyncBaseRepository[GroupMeetup]):
    """Repository for meetups and meetup participants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupMeetup)

    async def list_with_organizers(
        self, *, status: Optional[str] = None, limit: int = 20
    ) -> List[Tuple[GroupMeetup, User]]:
        """Meetups with their organizer, latest ``scheduled_at`` first."""
        stmt = select(GroupMeetup, User).join(User, User.id == GroupMeetup.organizer_id)
        if status and status != "all":
            stmt = stmt.where(GroupMeetup.status == status)
        stmt = stmt.order_by(GroupMeetup.scheduled_at.desc()).limit(limit)  # type: ignore
        return [(meetup, user) for meetup, user in (await self.session.exec(stmt)).all()]

    async def get_with_organizer(self, meetup_id: str) -> Optional[Tuple[GroupMeetup, User]]:
        stmt = select(GroupMeetup, User).join(User, User.id == GroupMeetup.organizer_id).where(
            GroupMeetup.id == meetup_id
        )
        row = (await self.session.exec(stmt)).first()
        return (row[0], row[1]) if row else None

    async def stats_by_meetup(self, meetup_ids: Sequence[str]) -> Dict[str, ParticipantStats]:
        if not meetup_ids:
            return {}
        stmt = select(MeetupParticipant).where(MeetupParticipant.meetup_id.in_(list(meetup_ids)))  # type: ignore
        stats: Dict[str, ParticipantStats] = {}
        for participant in (await self.session.exec(stmt)).all():
            stats.setdefault(participant.meetup_id, ParticipantStats()).include(participant)
        return stats

    async def participants_with_users(self, meetup_id: str) -> List[Tuple[MeetupParticipant, User]]:
        stmt = (
            select(MeetupParticipant, User)
            .join(User, User.id == MeetupParticipant.user_id)
            .where(MeetupParticipant.meetup_id == meetup_id)
            .order_by(MeetupParticipant.joined_at.asc())  # type: ignore
        )
        return [(participant, user) for participant, user in (await self.session.exec(stmt)).all()]

    async def get_participant(self, meetup_id: str, user_id: str) -> Optional[MeetupParticipant]:
        stmt = select(MeetupParticipant).where(
            MeetupParticipant.meetup_id == meetup_id,
            MeetupParticipant.user_id == user_id,
        )
        return (await self.session.exec(stmt)).first()

    async def add_participant(self, meetup_id: str, user_id: str, pledged_amount: int) -> MeetupParticipant:
        """Join a user to a meetup.

        Raises:
            AlreadyJoinedError: When the user already participates.
        """
        participant = MeetupParticipant(meetup_id=meetup_id, user_id=user_id, pledged_amount=pledged_amount)
        self.session.add(participant)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyJoinedError("Already joined this meetup") from e
        await self.session.refresh(participant)
        return participant

    async def remove_participant(self, meetup_id: str, user_id: str) -> bool:
        participant = await self.get_participant(meetup_id, user_id)
        if participant is None:
            return False
        await self.delete(participant)
        return True

    async def save_participant(self, participant: MeetupParticipant) -> MeetupParticipant:
        self.session.add(participant)
        await self.session.commit()
        await self.session.refresh(participant)
        return participant

    async def pending_donations(self, user_id: str) -> List[Tuple[MeetupParticipant, GroupMeetup]]:
        """Attended participations whose donation is still pending."""
        stmt = (
            select(MeetupParticipant, GroupMeetup)
            .join(GroupMeetup, GroupMeetup.id == MeetupParticipant.meetup_id)
            .where(
                MeetupParticipant.user_id == user_id,
                MeetupParticipant.attended == True,  # noqa: E712
                MeetupParticipant.donation_status == ParticipantDonationStatus.PENDING.value,
            )
        )
        return [(participant, meetup) for participant, meetup in (await self.session.exec(stmt)).all()]

    async def set_status(self, meetup: GroupMeetup, status: str) -> GroupMeetup:
        meetup.status = status
        now = utc_now()
        if status == MeetupStatus.COMPLETED.value:
            meetup.completed_at = now
        meetup.updated_at = now
        return await self.update(meetup)
