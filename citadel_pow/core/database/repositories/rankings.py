"""
Ranking repository.

Two kinds of rankings live here:

- the weekly leaderboard, read from the ``rankings`` table joined with users;
- category rankings, aggregated on the fly from study sessions (time) or
  completed donations (donation).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.donations import Donation, DonationStatus
from ..entities.rankings import Ranking
from ..entities.study_sessions import StudySession
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder


@dataclass
class CategoryTotal:
    """Per-user aggregate backing a category ranking entry."""

    user: User
    total: int
    count: int
    last_activity_at: Optional[datetime]


class RankingRepository(AsyncBaseRepository[Ranking]):
    """Repository for ranking data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Ranking)

    async def leaderboard(
        self, *, week: Optional[int] = None, year: Optional[int] = None, limit: int = 100
    ) -> List[Tuple[Ranking, User]]:
        stmt = select(Ranking, User).join(User, User.id == Ranking.user_id)
        stmt = QueryBuilder.apply_filters(stmt, Ranking, {"week_number": week, "year": year})
        stmt = stmt.order_by(Ranking.rank.asc()).limit(limit)  # type: ignore
        return [(ranking, user) for ranking, user in (await self.session.exec(stmt)).all()]

    async def history_for_user(self, user_id: str, *, limit: int = 10) -> List[Tuple[Ranking, User]]:
        stmt = (
            select(Ranking, User)
            .join(User, User.id == Ranking.user_id)
            .where(Ranking.user_id == user_id)
            .order_by(Ranking.created_at.desc())  # type: ignore
            .limit(limit)
        )
        return [(ranking, user) for ranking, user in (await self.session.exec(stmt)).all()]

    async def latest_for_user(self, user_id: str) -> Optional[Ranking]:
        history = await self.history_for_user(user_id, limit=1)
        return history[0][0] if history else None

    async def time_totals(self, *, category: Optional[str] = None, limit: int = 10) -> List[CategoryTotal]:
        """Study session seconds summed per user.

        A row counts its seconds, or its minutes when seconds are NULL.
        """
        seconds = func.coalesce(StudySession.duration_seconds, StudySession.duration_minutes * 60, 0)
        stmt = select(
            StudySession.user_id,
            func.sum(seconds),
            func.count(StudySession.id),
            func.max(StudySession.created_at),
        ).group_by(StudySession.user_id)
        stmt = QueryBuilder.apply_category(stmt, StudySession.donation_mode, category)
        merged = {
            user_id: (int(total or 0), int(count or 0), last_at)
            for user_id, total, count, last_at in (await self.session.exec(stmt)).all()
        }
        return await self._attach_users(merged, limit)

    async def donation_totals(self, *, category: Optional[str] = None, limit: int = 10) -> List[CategoryTotal]:
        """Completed donation amounts summed per user."""
        stmt = (
            select(
                Donation.user_id,
                func.sum(Donation.amount),
                func.count(Donation.id),
                func.max(Donation.created_at),
            )
            .where(Donation.status == DonationStatus.COMPLETED.value)
            .group_by(Donation.user_id)
        )
        stmt = QueryBuilder.apply_category(stmt, Donation.donation_mode, category)
        merged = {
            user_id: (int(total or 0), int(count or 0), last_at)
            for user_id, total, count, last_at in (await self.session.exec(stmt)).all()
        }
        return await self._attach_users(merged, limit)

    async def _attach_users(
        self, merged: Dict[str, Tuple[int, int, Optional[datetime]]], limit: int
    ) -> List[CategoryTotal]:
        ordered = sorted(merged.items(), key=lambda item: item[1][0], reverse=True)[:limit]
        if not ordered:
            return []
        ids = [user_id for user_id, _ in ordered]
        users = {u.id: u for u in (await self.session.exec(select(User).where(User.id.in_(ids)))).all()}  # type: ignore
        return [
            CategoryTotal(user=users[user_id], total=total, count=count, last_activity_at=last_at)
            for user_id, (total, count, last_at) in ordered
            if user_id in users
        ]
