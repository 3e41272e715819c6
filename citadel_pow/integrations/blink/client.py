"""Blink Lightning wallet GraphQL client

Overview
--------
Thin async client for the Blink GraphQL API. It exposes the handful of
operations the donation flow needs: locating the BTC wallet, reading its
balance, creating a Lightning invoice and checking an invoice's payment
status.

Errors
------
A non-2xx response or a non-empty top-level ``errors`` array raises
``BlinkApiError``. Mutation payload errors (``lnInvoiceCreate.errors``)
are raised the same way. ``get_wallet_balance`` is the only soft-failing
call: lookup failures are logged and reported as a zero balance.

Usage
-----
>>> client = BlinkClient("https://api.blink.sv/graphql", api_key="blink_...")
>>> invoice = await client.create_invoice(1000, "Citadel POW Donation")
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from citadel_pow.core.logging_config import get_logger

from .errors import BlinkApiError
from .models import BlinkInvoice, BlinkInvoicePayload, BlinkInvoiceStatusPayload, BlinkWallet, InvoiceStatus

logger = get_logger(__name__)

WALLETS_QUERY = """
query Me {
  me {
    defaultAccount {
      wallets {
        id
        walletCurrency
        balance
      }
    }
  }
}
"""

INVOICE_CREATE_MUTATION = """
mutation LnInvoiceCreate($input: LnInvoiceCreateInput!) {
  lnInvoiceCreate(input: $input) {
    invoice {
      paymentRequest
      paymentHash
      satoshis
    }
    errors {
      message
    }
  }
}
"""

INVOICE_STATUS_QUERY = """
query LnInvoicePaymentStatus($input: LnInvoicePaymentStatusInput!) {
  lnInvoicePaymentStatus(input: $input) {
    status
    errors {
      message
    }
  }
}
"""


class BlinkClient:
    """Async HTTP client for the Blink GraphQL endpoint."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        default_memo: str = "Citadel POW Donation",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Create a Blink client.

        Args:
            endpoint: GraphQL endpoint URL.
            api_key: Value sent in the ``X-API-KEY`` header.
            default_memo: Invoice memo used when the caller provides none.
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.AsyncClient`` to use.
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.default_memo = default_memo
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "X-API-KEY": self.api_key}

    async def aclose(self) -> None:
        await self._http.aclose()

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GraphQL document and return its ``data`` object.

        Raises:
            BlinkApiError: When the response status is non-2xx or GraphQL errors are reported.
        """
        try:
            r = await self._http.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers=self._headers(),
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BlinkApiError(
                f"Blink GraphQL request failed: {e.response.text}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise BlinkApiError(f"Blink GraphQL request failed: {e}") from e

        body = r.json()
        errors = body.get("errors") or []
        if errors:
            raise BlinkApiError(", ".join(str(err.get("message", "")) for err in errors), details=errors)
        return body.get("data") or {}

    async def _btc_wallet(self) -> Optional[BlinkWallet]:
        data = await self.graphql(WALLETS_QUERY)
        wallets = ((data.get("me") or {}).get("defaultAccount") or {}).get("wallets") or []
        for raw in wallets:
            wallet = BlinkWallet.model_validate(raw)
            if wallet.wallet_currency == "BTC":
                return wallet
        return None

    async def get_btc_wallet_id(self) -> str:
        """Return the id of the account's BTC wallet.

        Raises:
            BlinkApiError: When the account has no BTC wallet.
        """
        wallet = await self._btc_wallet()
        if wallet is None or not wallet.id:
            raise BlinkApiError("BTC wallet not found")
        return wallet.id

    async def get_wallet_balance(self) -> int:
        """Return the BTC wallet balance in sats, or 0 when it cannot be read."""
        try:
            wallet = await self._btc_wallet()
        except BlinkApiError as e:
            logger.warning(f"Failed to get wallet balance: {e}")
            return 0
        if wallet is None:
            logger.warning("Failed to get wallet balance: BTC wallet not found")
            return 0
        return int(wallet.balance or 0)

    async def create_invoice(self, amount: int, memo: Optional[str] = None) -> BlinkInvoice:
        """Create a Lightning invoice on the BTC wallet.

        Args:
            amount: Invoice amount in sats.
            memo: Invoice memo; defaults to ``default_memo``.

        Raises:
            BlinkApiError: When the mutation reports errors or returns no invoice.
        """
        wallet_id = await self.get_btc_wallet_id()
        variables = {"input": {"walletId": wallet_id, "amount": amount, "memo": memo or self.default_memo}}
        data = await self.graphql(INVOICE_CREATE_MUTATION, variables)
        payload = BlinkInvoicePayload.model_validate(data.get("lnInvoiceCreate") or {})
        if payload.errors:
            raise BlinkApiError(payload.errors[0].message or "Failed to create invoice", details=data)
        if payload.invoice is None or not payload.invoice.payment_request:
            raise BlinkApiError("Invalid invoice response", details=data)
        logger.info(f"Created Lightning invoice for {amount} sats")
        return payload.invoice

    async def check_invoice_status(self, payment_hash: str) -> InvoiceStatus:
        """Return whether the invoice with ``payment_hash`` is paid."""
        data = await self.graphql(INVOICE_STATUS_QUERY, {"input": {"paymentHash": payment_hash}})
        payload = BlinkInvoiceStatusPayload.model_validate(data.get("lnInvoicePaymentStatus") or {})
        if payload.errors:
            raise BlinkApiError(payload.errors[0].message or "Failed to check invoice status", details=data)
        paid = payload.status == "PAID"
        confirmed_at = datetime.now(timezone.utc).isoformat() if paid else None
        return InvoiceStatus(paid=paid, confirmed_at=confirmed_at)
