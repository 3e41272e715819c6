"""
Donation repository.

Aggregations only ever count ``completed`` donations; pending, paid, failed
and cancelled rows are payment bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..base import utc_now
from ..entities.donations import Donation, DonationStatus
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder


@dataclass(frozen=True)
class DonorTotal:
    user: User
    total_donated: int
    donation_count: int
    last_donation_at: Optional[datetime]


@dataclass(frozen=True)
class DonationTotals:
    total_amount: int
    total_donations: int

    @property
    def average_donation(self) -> float:
        return self.total_amount / self.total_donations if self.total_donations else 0


class DonationRepository(AsyncBaseRepository[Donation]):
    """Repository for donation data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Donation)

    async def top_donors(self, *, category: Optional[str] = None, limit: int = 50) -> List[DonorTotal]:
        """Completed donations summed per user, largest total first."""
        totals = (
            select(
                Donation.user_id,
                func.sum(Donation.amount).label("total"),
                func.count(Donation.id).label("count"),
                func.max(Donation.created_at).label("last_at"),
            )
            .where(Donation.status == DonationStatus.COMPLETED.value)
            .group_by(Donation.user_id)
        )
        totals = QueryBuilder.apply_category(totals, Donation.donation_mode, category).subquery()
        stmt = (
            select(User, totals.c.total, totals.c.count, totals.c.last_at)
            .join(totals, totals.c.user_id == User.id)
            .order_by(totals.c.total.desc(), totals.c.last_at.desc())
            .limit(limit)
        )
        rows = (await self.session.exec(stmt)).all()
        return [
            DonorTotal(user=user, total_donated=int(total or 0), donation_count=int(count), last_donation_at=last_at)
            for user, total, count, last_at in rows
        ]

    async def recent(self, *, limit: int = 20) -> List[Tuple[Donation, User]]:
        """Latest completed donations with their donor."""
        stmt = (
            select(Donation, User)
            .join(User, User.id == Donation.user_id)
            .where(Donation.status == DonationStatus.COMPLETED.value)
            .order_by(Donation.created_at.desc())  # type: ignore
            .limit(limit)
        )
        return [(donation, user) for donation, user in (await self.session.exec(stmt)).all()]

    async def totals(self, *, user_id: Optional[str] = None, currency: Optional[str] = None) -> DonationTotals:
        """Sum and count of completed donations, optionally for one user and currency."""
        stmt = select(func.coalesce(func.sum(Donation.amount), 0), func.count(Donation.id)).where(
            Donation.status == DonationStatus.COMPLETED.value
        )
        stmt = QueryBuilder.apply_filters(stmt, Donation, {"user_id": user_id, "currency": currency})
        total, count = (await self.session.exec(stmt)).one()
        return DonationTotals(total_amount=int(total or 0), total_donations=int(count or 0))

    async def list_for_user(
        self,
        user_id: str,
        *,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Donation]:
        """All of a user's donations (any status), newest first."""
        stmt = select(Donation).where(Donation.user_id == user_id)
        stmt = QueryBuilder.apply_category(stmt, Donation.donation_mode, category)
        stmt = QueryBuilder.apply_time_range(stmt, Donation.created_at, start, end)
        stmt = stmt.order_by(Donation.created_at.desc())  # type: ignore
        return list((await self.session.exec(stmt)).all())

    async def get_pending_by_transaction(self, transaction_id: str) -> Optional[Donation]:
        stmt = select(Donation).where(
            Donation.transaction_id == transaction_id,
            Donation.status == DonationStatus.PENDING.value,
        )
        return (await self.session.exec(stmt)).first()

    async def mark_paid(self, donation: Donation) -> Donation:
        donation.status = DonationStatus.PAID.value
        donation.paid_at = utc_now()
        return await self.update(donation)
