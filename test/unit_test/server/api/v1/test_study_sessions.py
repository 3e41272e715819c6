"""
Unit tests for Study Session API endpoints.

Tests cover:
- Creating sessions (stored achievement rate, seconds priority)
- Bulk creation
- Listing, statistics and today's summary
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest.fixture
def study_payload(registered_user):
    return {
        "discord_id": registered_user["discord_id"],
        "donation_mode": "pow-reading",
        "plan_text": "chapter 3",
        "start_time": "2026-01-15T09:00:00+09:00",
        "end_time": "2026-01-15T09:30:00+09:00",
        "duration_minutes": 30,
        "goal_minutes": 25,
        "achievement_rate": 120,
    }


class TestCreate:
    async def test_create(self, client: AsyncClient, study_payload):
        response = await client.post("/api/study-sessions", json=study_payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["achievement_rate"] == 120
        assert (data["duration_minutes"], data["duration_seconds"]) == (30, 1800)
        assert (data["goal_minutes"], data["goal_seconds"]) == (25, 1500)
        assert data["start_time"].startswith("2026-01-15T00:00:00")

    async def test_seconds_take_priority(self, client: AsyncClient, study_payload):
        data = (
            await client.post("/api/study-sessions", json={**study_payload, "duration_seconds": 95})
        ).json()["data"]

        assert (data["duration_seconds"], data["duration_minutes"]) == (95, 2)

    async def test_achievement_rate_bounds(self, client: AsyncClient, study_payload):
        response = await client.post("/api/study-sessions", json={**study_payload, "achievement_rate": 201})
        assert response.status_code == 400

    async def test_required_fields(self, client: AsyncClient, study_payload):
        payload = dict(study_payload)
        payload.pop("plan_text")
        response = await client.post("/api/study-sessions", json=payload)
        assert response.status_code == 400


class TestBulkAndRead:
    async def test_bulk(self, client: AsyncClient, study_payload):
        item = {k: v for k, v in study_payload.items() if k != "discord_id"}

        response = await client.post(
            "/api/study-sessions/bulk",
            json={"discord_id": study_payload["discord_id"], "sessions": [item, {**item, "duration_minutes": 10}]},
        )

        assert response.status_code == 201
        assert sorted(d["duration_seconds"] for d in response.json()["data"]) == [600, 1800]

    async def test_list_and_stats(self, client: AsyncClient, study_payload):
        await client.post("/api/study-sessions", json=study_payload)
        await client.post("/api/study-sessions", json={**study_payload, "donation_mode": "pow-art"})
        discord_id = study_payload["discord_id"]

        listed = (await client.get(f"/api/study-sessions/user/{discord_id}", params={"category": "pow-art"})).json()
        assert listed["count"] == 1
        assert listed["data"][0]["donation_mode"] == "pow-art"

        stats = (await client.get(f"/api/study-sessions/stats/{discord_id}")).json()["data"]
        assert stats["total_sessions"] == 2
        assert stats["total_study_minutes"] == 60

    async def test_today(self, client: AsyncClient, study_payload):
        await client.post("/api/study-sessions", json=study_payload)

        body = (await client.get(f"/api/study-sessions/today/{study_payload['discord_id']}")).json()

        assert body["count"] == 1
        assert body["total_minutes"] == 30
        assert "total_seconds" not in body

    async def test_unknown_user(self, client: AsyncClient):
        assert (await client.get("/api/study-sessions/stats/404")).status_code == 404
