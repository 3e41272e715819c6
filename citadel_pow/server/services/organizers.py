"""
Organizer role check for meetup creation.
"""

from __future__ import annotations

from typing import Optional, Sequence

from citadel_pow.core.logging_config import get_logger
from citadel_pow.server.core.config import settings

logger = get_logger(__name__)


def has_organizer_role(discord_id: str, organizer_ids: Optional[Sequence[str]] = None) -> bool:
    """Whether ``discord_id`` may create meetups.

    An empty organizer list allows everyone.
    """
    allowed = list(organizer_ids) if organizer_ids is not None else settings.meetup.organizer_ids
    if not allowed:
        logger.warning("ORGANIZER_DISCORD_IDS not configured - allowing all users")
        return True
    return discord_id in allowed
