"""
Shared I/O models.

Every successful response is wrapped in ``{"success": true, "data": ...}``;
list endpoints add a ``count``. Request datetimes are normalized to naive
UTC before they reach the database layer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope of a successful response."""

    success: bool = Field(default=True, description="Always true for successful responses")
    data: T


class ApiListResponse(BaseModel, Generic[T]):
    """Envelope of a successful list response."""

    success: bool = True
    data: List[T]
    count: int = Field(description="Number of items in data")


class SuccessResponse(BaseModel):
    """Envelope of an operation that returns no data."""

    success: bool = True
    message: Optional[str] = None


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
