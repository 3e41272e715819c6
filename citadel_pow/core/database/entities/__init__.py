"""
Database entity models.

Importing this package registers every table on ``Base.metadata``.
"""

from .accumulated_sats import AccumulatedSatsLog, LedgerAction, UserAccumulatedSats
from .discord_posts import DiscordPost
from .donations import Donation, DonationStatus
from .meetups import GroupMeetup, MeetupParticipant, MeetupStatus, ParticipantDonationStatus
from .pow_sessions import PowSession
from .rankings import Ranking
from .study_sessions import StudySession
from .users import DonationScope, User

__all__ = [
    "AccumulatedSatsLog",
    "DiscordPost",
    "Donation",
    "DonationScope",
    "DonationStatus",
    "GroupMeetup",
    "LedgerAction",
    "MeetupParticipant",
    "MeetupStatus",
    "ParticipantDonationStatus",
    "PowSession",
    "Ranking",
    "StudySession",
    "User",
]
