"""Error types specific to the Blink GraphQL API layer.

Usage:
- Catch ``BlinkApiError`` for any failure of ``BlinkClient`` and inspect
  ``status_code`` or ``details``.
"""

from __future__ import annotations

from typing import Any, Optional


class BlinkApiError(Exception):
    """Base error for Blink API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional structured payload from the server (e.g., GraphQL errors).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
