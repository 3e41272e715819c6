"""
Unit tests for Blink API endpoints.

Tests cover:
- Invoice creation and status checks against the fake Blink API
- Wallet balance
- Webhook settlement of pending donations
- 501 when Blink is not configured, 502 when Blink fails
"""

import pytest
from httpx import AsyncClient

from citadel_pow.core.database.entities import Donation
from citadel_pow.server.core.config import settings
from citadel_pow.server.main import app
from citadel_pow.server.services import deps

pytestmark = pytest.mark.asyncio


def receive_event(payment_hash: str, event_type: str = "receive.lightning") -> dict:
    return {
        "eventType": event_type,
        "transaction": {"initiationVia": {"type": "Lightning", "paymentHash": payment_hash}},
    }


class TestInvoices:
    async def test_create_invoice(self, client: AsyncClient, fake_blink):
        response = await client.post("/api/blink/create-invoice", json={"amount": 21, "memo": "thanks"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"invoice": "lnbc210n1pfake", "payment_hash": "hash-abc", "satoshis": 21},
        }
        variables = fake_blink.payloads()[-1]["variables"]["input"]
        assert variables == {"walletId": "wallet-btc", "amount": 21, "memo": "thanks"}

    async def test_create_invoice_rejects_zero_amount(self, client: AsyncClient):
        response = await client.post("/api/blink/create-invoice", json={"amount": 0})
        assert response.status_code == 400

    async def test_create_invoice_error_is_bad_gateway(self, client: AsyncClient, fake_blink):
        fake_blink.invoice_errors = ["Invalid amount"]

        response = await client.post("/api/blink/create-invoice", json={"amount": 21})

        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert body["detail"].startswith("Blink API error: ")
        assert "Invalid amount" in body["detail"]

    @pytest.mark.parametrize(
        "status, paid",
        [("PAID", True), ("PENDING", False), ("EXPIRED", False)],
    )
    async def test_check_invoice(self, client: AsyncClient, fake_blink, status, paid):
        fake_blink.invoice_status = status

        response = await client.post("/api/blink/check-invoice", json={"paymentHash": "hash-abc"})

        body = response.json()
        assert body["success"] is True
        assert body["data"]["paid"] is paid
        assert (body["data"]["confirmedAt"] is not None) is paid
        assert fake_blink.payloads()[-1]["variables"] == {"input": {"paymentHash": "hash-abc"}}

    async def test_check_invoice_requires_hash(self, client: AsyncClient):
        response = await client.post("/api/blink/check-invoice", json={})
        assert response.status_code == 400


class TestWalletBalance:
    async def test_balance(self, client: AsyncClient):
        response = await client.get("/api/blink/wallet-balance")
        assert response.json() == {"success": True, "data": {"balance": 21000}}

    async def test_balance_falls_back_to_zero(self, client: AsyncClient, fake_blink):
        fake_blink.fail_status = 503

        response = await client.get("/api/blink/wallet-balance")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"balance": 0}}


class TestNotConfigured:
    async def test_not_implemented(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "blink_api_endpoint", None)
        monkeypatch.setattr(settings, "blink_api_key", None)
        app.dependency_overrides.pop(deps.get_blink_client)

        response = await client.get("/api/blink/wallet-balance")

        assert response.status_code == 501
        assert response.json() == {"success": False, "detail": "Blink API not configured"}


class TestWebhook:
    async def test_marks_pending_donation_paid(self, client: AsyncClient, session, registered_user):
        donation = Donation(user_id=registered_user["id"], amount=21, date="2026-01-15", transaction_id="hash-abc")
        session.add(donation)
        await session.commit()

        response = await client.post("/api/blink/webhook", json=receive_event("hash-abc"))

        assert response.json() == {"success": True, "message": None}
        await session.refresh(donation)
        assert donation.status == "paid"
        assert donation.paid_at is not None

    @pytest.mark.parametrize(
        "event",
        [
            receive_event("hash-abc", event_type="send.lightning"),
            receive_event("other-hash"),
            {"eventType": "receive.lightning"},
        ],
    )
    async def test_ignored_events(self, client: AsyncClient, session, registered_user, event):
        donation = Donation(user_id=registered_user["id"], amount=21, date="2026-01-15", transaction_id="hash-abc")
        session.add(donation)
        await session.commit()

        response = await client.post("/api/blink/webhook", json=event)

        assert response.status_code == 200
        await session.refresh(donation)
        assert donation.status == "pending"

    async def test_completed_donation_untouched(self, client: AsyncClient, session, registered_user):
        donation = Donation(
            user_id=registered_user["id"],
            amount=21,
            date="2026-01-15",
            transaction_id="hash-abc",
            status="completed",
        )
        session.add(donation)
        await session.commit()

        await client.post("/api/blink/webhook", json=receive_event("hash-abc"))

        await session.refresh(donation)
        assert donation.status == "completed"
