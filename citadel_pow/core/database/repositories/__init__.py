"""
Repositories for the centralized database layer.

Each repository wraps one table (or a closely related group of tables) and
exposes async query helpers over a SQLModel ``AsyncSession``.
"""

from .accumulated_sats import AccumulatedSatsRepository, BalanceCheck, LedgerChange
from .base import AsyncBaseRepository, QueryBuilder
from .discord_posts import DiscordPostRepository, PopularPost
from .donations import DonationRepository, DonationTotals, DonorTotal
from .meetups import MeetupRepository, ParticipantStats
from .rankings import CategoryTotal, RankingRepository
from .sessions import PowSessionRepository, SessionStats, StudySessionRepository, find_session
from .users import UserRepository

__all__ = [
    "AccumulatedSatsRepository",
    "AsyncBaseRepository",
    "BalanceCheck",
    "CategoryTotal",
    "DiscordPostRepository",
    "DonationRepository",
    "DonationTotals",
    "DonorTotal",
    "LedgerChange",
    "MeetupRepository",
    "ParticipantStats",
    "PopularPost",
    "PowSessionRepository",
    "QueryBuilder",
    "RankingRepository",
    "SessionStats",
    "StudySessionRepository",
    "UserRepository",
    "find_session",
]
