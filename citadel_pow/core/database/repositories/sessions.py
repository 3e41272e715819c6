"""
Study and POW session repositories.

Both tables share the same read surface; they differ only in which column
holds the activity category (``donation_mode`` vs ``pow_fields``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.discord_posts import DiscordPost
from ..entities.pow_sessions import PowSession
from ..entities.study_sessions import StudySession
from .base import AsyncBaseRepository, QueryBuilder

SessionType = TypeVar("SessionType", StudySession, PowSession)
AnySession = Union[StudySession, PowSession]


@dataclass(frozen=True)
class SessionStats:
    total_sessions: int
    total_study_seconds: int
    last_study_at: Optional[datetime]

    @property
    def total_study_minutes(self) -> int:
        return self.total_study_seconds // 60

    @property
    def avg_session_minutes(self) -> float:
        if not self.total_sessions:
            return 0
        return round(self.total_study_seconds / 60 / self.total_sessions, 1)


def effective_seconds(model: Type[AnySession]):
    """SQL expression for a row's duration in seconds.

    Rows written before seconds were tracked only carry minutes.
    """
    return case(
        (model.duration_seconds > 0, model.duration_seconds),
        else_=model.duration_minutes * 60,
    )


class _SessionRepository(AsyncBaseRepository[SessionType], Generic[SessionType]):
    """Shared queries for session tables."""

    category_field: str

    def __init__(self, session: AsyncSession, model: Type[SessionType]) -> None:
        super().__init__(session, model)

    @property
    def category_column(self):
        return getattr(self.model, self.category_field)

    async def list_for_user(
        self,
        user_id: str,
        *,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[SessionType]:
        """A user's sessions, newest first, narrowed by category and creation time."""
        stmt = select(self.model).where(self.model.user_id == user_id)
        stmt = QueryBuilder.apply_category(stmt, self.category_column, category)
        stmt = QueryBuilder.apply_time_range(stmt, self.model.created_at, start, end)
        stmt = stmt.order_by(self.model.created_at.desc())  # type: ignore
        stmt = QueryBuilder.apply_pagination(stmt, limit, None)
        return list((await self.session.exec(stmt)).all())

    async def stats_for_user(self, user_id: str) -> SessionStats:
        stmt = select(
            func.count(self.model.id),
            func.coalesce(func.sum(effective_seconds(self.model)), 0),
            func.max(self.model.created_at),
        ).where(self.model.user_id == user_id)
        count, seconds, last_at = (await self.session.exec(stmt)).one()
        return SessionStats(total_sessions=int(count or 0), total_study_seconds=int(seconds or 0), last_study_at=last_at)

    async def create_many(self, sessions: Sequence[SessionType]) -> List[SessionType]:
        self.session.add_all(list(sessions))
        await self.session.commit()
        for item in sessions:
            await self.session.refresh(item)
        return list(sessions)

    async def set_discord_message_id(self, session_id: str, message_id: str) -> bool:
        """Link a session to its Discord post. Returns False when the session is not in this table."""
        item = await self.get_by_id(session_id)
        if item is None:
            return False
        item.discord_message_id = message_id
        await self.update(item)
        return True

    async def set_reaction_count(self, message_id: str, reaction_count: int) -> int:
        """Copy a post's reaction count onto every session linked to it."""
        stmt = select(self.model).where(self.model.discord_message_id == message_id)
        items = list((await self.session.exec(stmt)).all())
        for item in items:
            item.reaction_count = reaction_count
            self.session.add(item)
        if items:
            await self.session.commit()
        return len(items)

    async def posts_by_session(self, session_ids: Sequence[str]) -> Dict[str, List[DiscordPost]]:
        """Discord posts linked to the given sessions, keyed by session id."""
        if not session_ids:
            return {}
        stmt = select(DiscordPost).where(DiscordPost.session_id.in_(list(session_ids)))  # type: ignore
        grouped: Dict[str, List[DiscordPost]] = {}
        for post in (await self.session.exec(stmt)).all():
            grouped.setdefault(post.session_id, []).append(post)
        return grouped


class StudySessionRepository(_SessionRepository[StudySession]):
    """Repository for study sessions; category is ``donation_mode``."""

    category_field = "donation_mode"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, StudySession)


class PowSessionRepository(_SessionRepository[PowSession]):
    """Repository for POW sessions; category is ``pow_fields``."""

    category_field = "pow_fields"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PowSession)


async def find_session(session: AsyncSession, session_id: str) -> Optional[AnySession]:
    """Look a session id up in both session tables."""
    found = await session.get(StudySession, session_id)
    if found is None:
        found = await session.get(PowSession, session_id)
    return found
