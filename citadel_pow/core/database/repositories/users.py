"""
User repository.

Resolves Discord ids to users and maintains user profile rows.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from citadel_pow.core.errors import UserNotFoundError

from ..base import utc_now
from ..entities.users import User
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_discord_id(self, discord_id: str) -> Optional[User]:
        result = await self.session.exec(select(User).where(User.discord_id == discord_id))
        return result.first()

    async def require_by_discord_id(self, discord_id: str) -> User:
        """Get a user by Discord id.

        Raises:
            UserNotFoundError: When no user has this Discord id.
        """
        user = await self.get_by_discord_id(discord_id)
        if user is None:
            raise UserNotFoundError(discord_id)
        return user

    async def upsert(self, discord_id: str, discord_username: str, **profile: Optional[str]) -> User:
        """Create the user, or refresh the username and the profile fields given.

        Profile fields left out (``discord_avatar``) keep their stored value.
        """
        user = await self.get_by_discord_id(discord_id)
        if user is None:
            user = User(discord_id=discord_id, discord_username=discord_username, **profile)
        else:
            user.discord_username = discord_username
            for field, value in profile.items():
                setattr(user, field, value)
            user.updated_at = utc_now()
        return await self.update(user)

    async def update_settings(self, user: User, *, donation_scope: Optional[str] = None) -> User:
        if donation_scope is not None:
            user.donation_scope = donation_scope
        user.updated_at = utc_now()
        return await self.update(user)
