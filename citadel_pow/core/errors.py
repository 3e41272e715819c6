"""Domain error types for Citadel POW.

Purpose:
- Provide typed exceptions raised by repositories and services.
- Carry the HTTP status, a machine-readable ``code`` and optional ``details``
  so the server layer can render a consistent error envelope.

Usage:
- Catch ``CitadelPowError`` for general failures and inspect ``status_code``,
  ``code`` or ``details``.
"""

from __future__ import annotations

from typing import Any, Optional


class CitadelPowError(Exception):
    """Base error for domain failures.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code associated with the failure.
        code: Machine-readable error code.
        details: Optional structured payload for diagnosis.
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(CitadelPowError):
    """Raised when a referenced row does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class UserNotFoundError(NotFoundError):
    """Raised when a Discord id does not resolve to a user."""

    def __init__(self, discord_id: str) -> None:
        super().__init__("User not found", details={"discord_id": discord_id})


class DuplicateSessionError(CitadelPowError):
    """Raised when a session already credited the user's balance."""

    status_code = 409
    code = "DUPLICATE_SESSION"


class InsufficientBalanceError(CitadelPowError):
    """Raised when a deduction exceeds the user's balance."""

    status_code = 400
    code = "INSUFFICIENT_BALANCE"


class BalanceMismatchError(CitadelPowError):
    """Raised when the locked balance differs from the balance the client expected."""

    status_code = 409
    code = "BALANCE_MISMATCH"


class ConcurrentUpdateError(CitadelPowError):
    """Raised when a concurrent write prevented a ledger update."""

    status_code = 409
    code = "CONCURRENT_UPDATE"


class AlreadyJoinedError(CitadelPowError):
    """Raised when a user joins the same meetup twice."""

    status_code = 400
    code = "ALREADY_JOINED"


class InvalidRequestError(CitadelPowError):
    """Raised when a query parameter or body value is malformed."""

    status_code = 400
    code = "INVALID_REQUEST"
