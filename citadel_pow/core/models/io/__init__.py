"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- common: Response envelopes
- users, accumulated_sats, donations, sessions, discord_posts, rankings,
  meetups, blink: Per-resource request and response models
"""

from .accumulated_sats import (
    AccumulatedSatsAdd,
    AccumulatedSatsDeduct,
    AccumulatedSatsLogPage,
    AccumulatedSatsLogRead,
    AccumulatedSatsRead,
    BalanceCheckRead,
    BalanceValidationResponse,
    LedgerChangeRead,
)
from .blink import BlinkWebhookEvent, InvoiceCheck, InvoiceCreate, InvoiceRead, WalletBalanceRead
from .common import ApiListResponse, ApiResponse, SuccessResponse, to_naive_utc
from .discord_posts import (
    DiscordPostCreate,
    DiscordPostRead,
    DiscordPostWithAuthor,
    DiscordShareRequest,
    DiscordShareResponse,
    PopularPostRead,
    PostAuthor,
    ReactionsUpdate,
)
from .donations import (
    DonationCreate,
    DonationCreateStatus,
    DonationRead,
    DonationStatsRead,
    RecentDonationRead,
    TopDonorRead,
    TopDonorsResponse,
    UserDonationsRead,
    UserDonationsResponse,
)
from .meetups import (
    CheckInResult,
    MeetupCheckIn,
    MeetupCreate,
    MeetupDetails,
    MeetupDonationComplete,
    MeetupDonationResult,
    MeetupJoin,
    MeetupJoinResult,
    MeetupMember,
    MeetupRead,
    MeetupStatusUpdate,
    MeetupStatusUpdateValue,
    MeetupSummary,
    OrganizerRead,
    ParticipantRead,
    PendingMeetupDonation,
    QRCodeRead,
)
from .rankings import (
    CategoryRankingResponse,
    CurrentLeaderboardResponse,
    DonationRankingEntry,
    LeaderboardEntry,
    LeaderboardResponse,
    RankingType,
    TimeRankingEntry,
)
from .sessions import (
    DiscordPostLink,
    PowSessionBulkCreate,
    PowSessionCreate,
    PowSessionFields,
    PowSessionRead,
    PowTodaySessionsResponse,
    SessionListResponse,
    SessionStatsRead,
    StudySessionBulkCreate,
    StudySessionBulkItem,
    StudySessionCreate,
    StudySessionRead,
    TodaySessionsResponse,
)
from .users import UserRead, UserSettingsUpdate, UserStats, UserUpsert

__all__ = [
    "AccumulatedSatsAdd",
    "AccumulatedSatsDeduct",
    "AccumulatedSatsLogPage",
    "AccumulatedSatsLogRead",
    "AccumulatedSatsRead",
    "ApiListResponse",
    "ApiResponse",
    "BalanceCheckRead",
    "BalanceValidationResponse",
    "BlinkWebhookEvent",
    "CategoryRankingResponse",
    "CheckInResult",
    "CurrentLeaderboardResponse",
    "DiscordPostCreate",
    "DiscordPostLink",
    "DiscordPostRead",
    "DiscordPostWithAuthor",
    "DiscordShareRequest",
    "DiscordShareResponse",
    "DonationCreate",
    "DonationCreateStatus",
    "DonationRankingEntry",
    "DonationRead",
    "DonationStatsRead",
    "InvoiceCheck",
    "InvoiceCreate",
    "InvoiceRead",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "LedgerChangeRead",
    "MeetupCheckIn",
    "MeetupCreate",
    "MeetupDetails",
    "MeetupDonationComplete",
    "MeetupDonationResult",
    "MeetupJoin",
    "MeetupJoinResult",
    "MeetupMember",
    "MeetupRead",
    "MeetupStatusUpdate",
    "MeetupStatusUpdateValue",
    "MeetupSummary",
    "OrganizerRead",
    "ParticipantRead",
    "PendingMeetupDonation",
    "PopularPostRead",
    "PostAuthor",
    "PowSessionBulkCreate",
    "PowSessionCreate",
    "PowSessionFields",
    "PowSessionRead",
    "PowTodaySessionsResponse",
    "QRCodeRead",
    "RankingType",
    "ReactionsUpdate",
    "RecentDonationRead",
    "SessionListResponse",
    "SessionStatsRead",
    "StudySessionBulkCreate",
    "StudySessionBulkItem",
    "StudySessionCreate",
    "StudySessionRead",
    "SuccessResponse",
    "TimeRankingEntry",
    "TodaySessionsResponse",
    "TopDonorRead",
    "TopDonorsResponse",
    "UserDonationsRead",
    "UserDonationsResponse",
    "UserRead",
    "UserSettingsUpdate",
    "UserStats",
    "UserUpsert",
    "to_naive_utc",
]
