"""Blink Lightning wallet integration."""

from .client import BlinkClient
from .errors import BlinkApiError
from .models import BlinkInvoice, InvoiceStatus

__all__ = ["BlinkApiError", "BlinkClient", "BlinkInvoice", "InvoiceStatus"]
