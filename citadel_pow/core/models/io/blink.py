"""
Blink payment I/O models for API requests and responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceCreate(BaseModel):
    amount: int = Field(gt=0, description="Invoice amount in sats")
    memo: Optional[str] = None


class InvoiceRead(BaseModel):
    invoice: str = Field(description="BOLT11 payment request")
    payment_hash: str
    satoshis: Optional[int] = None


class InvoiceCheck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_hash: str = Field(alias="paymentHash", min_length=1)


class WalletBalanceRead(BaseModel):
    balance: int = Field(description="BTC wallet balance in sats")


class BlinkWebhookEvent(BaseModel):
    """Webhook delivery from Blink; only the fields used to settle donations are typed."""

    model_config = ConfigDict(extra="allow")

    event_type: Optional[str] = Field(default=None, alias="eventType")
    transaction: Optional[Dict[str, Any]] = None

    @property
    def payment_hash(self) -> Optional[str]:
        initiation = (self.transaction or {}).get("initiationVia") or {}
        return initiation.get("paymentHash")
