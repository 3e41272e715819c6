"""Error types specific to the Discord REST and webhook layer."""

from __future__ import annotations

from typing import Any, Optional


class DiscordApiError(Exception):
    """Base error for Discord API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional response body returned by Discord.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
