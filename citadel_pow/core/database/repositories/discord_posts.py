"""
Discord post repository.

Popular posts are read together with their author and the session they
were shared from; a post's ``session_id`` may name a study or a POW session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..base import utc_now
from ..entities.discord_posts import DiscordPost
from ..entities.pow_sessions import PowSession
from ..entities.study_sessions import StudySession
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder
from .sessions import AnySession


@dataclass(frozen=True)
class PopularPost:
    post: DiscordPost
    user: User
    session: Optional[AnySession]


class DiscordPostRepository(AsyncBaseRepository[DiscordPost]):
    """Repository for Discord post data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DiscordPost)

    async def get_by_message_id(self, message_id: str) -> Optional[DiscordPost]:
        result = await self.session.exec(select(DiscordPost).where(DiscordPost.message_id == message_id))
        return result.first()

    async def get_with_user(self, message_id: str) -> Optional[Tuple[DiscordPost, User]]:
        stmt = select(DiscordPost, User).join(User, User.id == DiscordPost.user_id).where(
            DiscordPost.message_id == message_id
        )
        row = (await self.session.exec(stmt)).first()
        return (row[0], row[1]) if row else None

    async def popular(self, *, category: Optional[str] = None, limit: int = 20) -> List[PopularPost]:
        """Posts ordered by reaction count, then recency."""
        stmt = select(DiscordPost, User).join(User, User.id == DiscordPost.user_id)
        stmt = QueryBuilder.apply_category(stmt, DiscordPost.donation_mode, category)
        stmt = stmt.order_by(
            DiscordPost.reaction_count.desc(),  # type: ignore
            DiscordPost.created_at.desc(),  # type: ignore
        ).limit(limit)
        rows = (await self.session.exec(stmt)).all()

        session_ids = [post.session_id for post, _ in rows if post.session_id]
        sessions = await self._sessions_by_id(session_ids)
        return [PopularPost(post=post, user=user, session=sessions.get(post.session_id or "")) for post, user in rows]

    async def _sessions_by_id(self, session_ids: List[str]) -> Dict[str, AnySession]:
        if not session_ids:
            return {}
        found: Dict[str, AnySession] = {}
        for model in (StudySession, PowSession):
            stmt = select(model).where(model.id.in_(session_ids))  # type: ignore
            for item in (await self.session.exec(stmt)).all():
                found.setdefault(item.id, item)
        return found

    async def update_reactions(
        self, post: DiscordPost, reaction_count: int, reactions: Optional[Dict[str, int]] = None
    ) -> DiscordPost:
        post.reaction_count = reaction_count
        if reactions is not None:
            post.reactions = dict(reactions)
        post.updated_at = utc_now()
        return await self.update(post)

    async def delete_by_message_id(self, message_id: str) -> bool:
        post = await self.get_by_message_id(message_id)
        if post is None:
            return False
        await self.delete(post)
        return True

    async def engagement_for_user(self, user_id: str) -> Tuple[int, int]:
        """Number of posts and total reactions of a user."""
        stmt = select(func.count(DiscordPost.id), func.coalesce(func.sum(DiscordPost.reaction_count), 0)).where(
            DiscordPost.user_id == user_id
        )
        count, reactions = (await self.session.exec(stmt)).one()
        return int(count or 0), int(reactions or 0)
