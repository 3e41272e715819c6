"""In-memory stand-ins for the Blink GraphQL API and the Discord REST API.

Each fake is an ``httpx.MockTransport`` handler: it records every request
and answers the way the real service does for the calls the app makes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx


class FakeBlink:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.wallets: List[Dict[str, Any]] = [
            {"id": "wallet-usd", "walletCurrency": "USD", "balance": 150},
            {"id": "wallet-btc", "walletCurrency": "BTC", "balance": 21000},
        ]
        self.invoice_status = "PENDING"
        self.invoice_errors: List[str] = []
        self.graphql_errors: List[str] = []
        self.fail_status: Optional[int] = None

    def payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, text="upstream unavailable")
        if self.graphql_errors:
            return httpx.Response(200, json={"errors": [{"message": m} for m in self.graphql_errors]})

        payload = json.loads(request.content)
        query = payload["query"]
        if "lnInvoiceCreate" in query:
            amount = payload["variables"]["input"]["amount"]
            invoice = None
            if not self.invoice_errors:
                invoice = {"paymentRequest": "lnbc210n1pfake", "paymentHash": "hash-abc", "satoshis": amount}
            body = {"lnInvoiceCreate": {"invoice": invoice, "errors": [{"message": m} for m in self.invoice_errors]}}
        elif "lnInvoicePaymentStatus" in query:
            body = {"lnInvoicePaymentStatus": {"status": self.invoice_status, "errors": []}}
        else:
            body = {"me": {"defaultAccount": {"wallets": self.wallets}}}
        return httpx.Response(200, json={"data": body})


class FakeDiscord:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.fail_status: Optional[int] = None
        self.next_message_id = "msg-1001"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Missing Access", "code": 50001})
        if request.url.path.endswith("/messages"):
            channel_id = request.url.path.split("/")[-2]
            return httpx.Response(200, json={"id": self.next_message_id, "channel_id": channel_id, "content": ""})
        return httpx.Response(204)

    def webhook_payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if "/webhooks/" in r.url.path]
