"""
Accumulated sats I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AccumulatedSatsRead(BaseModel):
    """Current balance of a user."""

    accumulated_sats: int = 0
    last_updated: Optional[datetime] = None


class AccumulatedSatsAdd(BaseModel):
    """Schema for crediting sats to a user."""

    discord_id: str = Field(min_length=1)
    amount: int = Field(gt=0, description="Sats to credit")
    session_id: Optional[UUID] = Field(default=None, description="Session the credit belongs to (credited at most once)")
    note: Optional[str] = None


class AccumulatedSatsDeduct(BaseModel):
    """Schema for debiting sats from a user."""

    discord_id: str = Field(min_length=1)
    amount: int = Field(gt=0, description="Sats to debit")
    donation_id: Optional[UUID] = Field(default=None, description="Donation paid with these sats")
    note: Optional[str] = None
    expected_balance: Optional[int] = Field(
        default=None, ge=0, description="Balance the client saw; the debit is rejected if it changed"
    )


class LedgerChangeRead(BaseModel):
    """Result of a balance change."""

    accumulated_sats: int
    amount_before: int
    amount_after: int
    change_amount: int


class AccumulatedSatsLogRead(BaseModel):
    """Schema for reading a ledger log entry from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount_before: int
    amount_after: int
    change_amount: int
    action: str
    session_id: Optional[str] = None
    donation_id: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime


class AccumulatedSatsLogPage(BaseModel):
    success: bool = True
    data: List[AccumulatedSatsLogRead]
    count: int = Field(description="Total number of log entries of the user")
    limit: int
    offset: int


class BalanceCheckRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    main_table_sats: int
    calculated_from_logs: int
    is_valid: bool


class BalanceValidationResponse(BaseModel):
    success: bool = True
    data: List[BalanceCheckRead]
    invalid_count: int
    invalid_users: List[BalanceCheckRead]
