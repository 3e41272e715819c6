"""
Unit tests for User API endpoints.

Tests cover:
- Upserting users by Discord id
- Reading a user and the 404 envelope
- Updating the donation scope setting
- Profile statistics (rank, completed SAT donations, post engagement)
"""

import pytest
from httpx import AsyncClient

from citadel_pow.core.database.entities import DiscordPost, Donation, Ranking

pytestmark = pytest.mark.asyncio


class TestUpsert:
    async def test_create(self, client: AsyncClient, user_payload):
        response = await client.post("/api/users", json=user_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["discord_id"] == user_payload["discord_id"]
        assert body["data"]["discord_avatar"] == "avatar-hash"
        assert body["data"]["donation_scope"] == "session"

    async def test_update_keeps_id(self, client: AsyncClient, registered_user, user_payload):
        response = await client.post("/api/users", json={**user_payload, "discord_username": "hal"})

        data = response.json()["data"]
        assert data["id"] == registered_user["id"]
        assert data["discord_username"] == "hal"

    async def test_update_without_avatar_keeps_avatar(self, client: AsyncClient, registered_user):
        await client.post(
            "/api/users",
            json={"discord_id": registered_user["discord_id"], "discord_username": "hal"},
        )

        data = (await client.get(f"/api/users/{registered_user['discord_id']}")).json()["data"]
        assert data["discord_username"] == "hal"
        assert data["discord_avatar"] == "avatar-hash"

    async def test_explicit_null_clears_avatar(self, client: AsyncClient, registered_user):
        response = await client.post(
            "/api/users",
            json={"discord_id": registered_user["discord_id"], "discord_username": "hal", "discord_avatar": None},
        )

        assert response.json()["data"]["discord_avatar"] is None

    async def test_missing_username(self, client: AsyncClient):
        response = await client.post("/api/users", json={"discord_id": "1"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["detail"] == "Invalid request body"
        assert body["errors"]


class TestGetUser:
    async def test_found(self, client: AsyncClient, registered_user):
        response = await client.get(f"/api/users/{registered_user['discord_id']}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == registered_user["id"]

    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/users/404")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "detail": "User not found",
            "code": "NOT_FOUND",
            "details": {"discord_id": "404"},
        }


class TestSettings:
    async def test_update_scope(self, client: AsyncClient, registered_user):
        response = await client.patch(
            f"/api/users/{registered_user['discord_id']}/settings", json={"donation_scope": "total"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["donation_scope"] == "total"

    async def test_invalid_scope(self, client: AsyncClient, registered_user):
        response = await client.patch(
            f"/api/users/{registered_user['discord_id']}/settings", json={"donation_scope": "weekly"}
        )
        assert response.status_code == 400

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.patch("/api/users/404/settings", json={"donation_scope": "total"})
        assert response.status_code == 404


class TestStats:
    async def test_empty_profile(self, client: AsyncClient, registered_user):
        response = await client.get(f"/api/users/{registered_user['discord_id']}/stats")

        data = response.json()["data"]
        assert data["current_rank"] is None
        assert data["current_score"] == 0
        assert (data["total_donated_sats"], data["donation_count"]) == (0, 0)
        assert (data["post_count"], data["total_engagement"]) == (0, 0)

    async def test_aggregates(self, client: AsyncClient, session, registered_user):
        user_id = registered_user["id"]
        session.add_all(
            [
                Ranking(user_id=user_id, pow_score=42.5, rank=3, week_number=2, year=2026),
                Donation(user_id=user_id, amount=100, status="completed", date="2026-01-15"),
                Donation(user_id=user_id, amount=50, status="completed", date="2026-01-15"),
                Donation(user_id=user_id, amount=999, status="pending", date="2026-01-15"),
                Donation(user_id=user_id, amount=5, currency="USD", status="completed", date="2026-01-15"),
                DiscordPost(message_id="m1", channel_id="c", user_id=user_id, reaction_count=4),
                DiscordPost(message_id="m2", channel_id="c", user_id=user_id, reaction_count=6),
            ]
        )
        await session.commit()

        response = await client.get(f"/api/users/{registered_user['discord_id']}/stats")

        data = response.json()["data"]
        assert data["user"]["id"] == user_id
        assert (data["current_rank"], data["current_score"]) == (3, 42.5)
        assert data["total_donated_sats"] == data["total_donated"] == 150
        assert data["donation_count"] == 2
        assert (data["post_count"], data["total_engagement"]) == (2, 10)
