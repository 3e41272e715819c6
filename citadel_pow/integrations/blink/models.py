"""Blink GraphQL DTO models

Pydantic DTOs for the subset of the Blink GraphQL API used to receive
donations. Field aliases follow the wire schema (``walletCurrency``,
``paymentRequest``); models allow extra fields since the API evolves.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BlinkBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class BlinkGraphQLError(BlinkBaseModel):
    message: str = ""


class BlinkWallet(BlinkBaseModel):
    """A wallet of the Blink default account."""

    id: str
    wallet_currency: str = Field(alias="walletCurrency")
    balance: Optional[int] = None


class BlinkInvoice(BlinkBaseModel):
    """Lightning invoice returned by ``lnInvoiceCreate``."""

    payment_request: str = Field(alias="paymentRequest")
    payment_hash: str = Field(alias="paymentHash")
    satoshis: Optional[int] = None


class BlinkInvoicePayload(BlinkBaseModel):
    invoice: Optional[BlinkInvoice] = None
    errors: List[BlinkGraphQLError] = Field(default_factory=list)


class BlinkInvoiceStatusPayload(BlinkBaseModel):
    status: Optional[str] = None
    errors: List[BlinkGraphQLError] = Field(default_factory=list)


class InvoiceStatus(BaseModel):
    """Payment state of an invoice as exposed by the API."""

    model_config = ConfigDict(populate_by_name=True)

    paid: bool
    confirmed_at: Optional[str] = Field(default=None, alias="confirmedAt")
