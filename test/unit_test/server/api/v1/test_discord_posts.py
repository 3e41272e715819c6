"""
Unit tests for Discord Post API endpoints.

Tests cover:
- Sharing POW cards through the bot and linking the post to its session
- Registering bot-created posts, syncing reactions and deleting posts
- Popular posts with session details
"""

import base64
from datetime import datetime

import pytest
from httpx import AsyncClient

from citadel_pow.core.database.entities import PowSession, StudySession
from test.unit_test.server.conftest import TEST_CHANNEL_ID

pytestmark = pytest.mark.asyncio

PNG = base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode()
START = datetime(2026, 1, 15, 9)


@pytest.fixture
def share_payload(registered_user):
    return {
        "discord_id": registered_user["discord_id"],
        "session_id": "00000000-0000-0000-0000-000000000001",
        "photo_url": f"data:image/png;base64,{PNG}",
        "plan_text": "read the whitepaper",
        "donation_mode": "pow-reading",
        "duration_seconds": 1530,
        "donation_scope": "total",
        "donation_sats": 21,
        "total_accumulated_sats": 210,
    }


class TestShare:
    async def test_share(self, client: AsyncClient, share_payload, fake_discord):
        response = await client.post("/api/discord-posts/share", json=share_payload)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message_id": "msg-1001", "channel_id": TEST_CHANNEL_ID}

        request = fake_discord.requests[-1]
        assert request.url.path.endswith(f"/channels/{TEST_CHANNEL_ID}/messages")
        assert request.headers["Authorization"] == "Bot bot-token"
        body = request.content.decode("utf-8", errors="replace")
        assert "21sats 적립! 총 적립액 210sats!" in body
        assert "25분 30초" in body
        assert "read the whitepaper" in body

        post = (await client.get("/api/discord-posts/msg-1001")).json()["data"]
        assert post["channel_id"] == TEST_CHANNEL_ID
        assert post["session_id"] == share_payload["session_id"]
        assert post["users"] == {"discord_username": "satoshi", "discord_avatar": "avatar-hash"}

    async def test_links_pow_session(self, client: AsyncClient, session, registered_user, share_payload):
        pow_session = PowSession(user_id=registered_user["id"], start_time=START, end_time=START)
        session.add(pow_session)
        await session.commit()

        await client.post("/api/discord-posts/share", json={**share_payload, "session_id": pow_session.id})

        await session.refresh(pow_session)
        assert pow_session.discord_message_id == "msg-1001"

    async def test_discord_failure(self, client: AsyncClient, share_payload, fake_discord):
        fake_discord.fail_status = 403

        response = await client.post("/api/discord-posts/share", json=share_payload)

        assert response.status_code == 502
        assert response.json() == {"success": False, "detail": "Failed to send message to Discord"}
        assert (await client.get("/api/discord-posts/msg-1001")).status_code == 404

    async def test_unknown_user(self, client: AsyncClient, share_payload):
        response = await client.post("/api/discord-posts/share", json={**share_payload, "discord_id": "404"})
        assert response.status_code == 404

    async def test_missing_fields(self, client: AsyncClient, share_payload):
        payload = dict(share_payload)
        payload.pop("photo_url")
        response = await client.post("/api/discord-posts/share", json=payload)
        assert response.status_code == 400


class TestPosts:
    async def test_create_links_study_session(self, client: AsyncClient, session, registered_user):
        study = StudySession(
            user_id=registered_user["id"],
            donation_mode="pow-art",
            start_time=START,
            end_time=START,
            duration_minutes=10,
        )
        session.add(study)
        await session.commit()

        response = await client.post(
            "/api/discord-posts",
            json={
                "message_id": "m-1",
                "channel_id": "c-1",
                "discord_id": registered_user["discord_id"],
                "session_id": study.id,
                "donation_mode": "pow-art",
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert (data["message_id"], data["reaction_count"], data["reactions"]) == ("m-1", 0, {})
        await session.refresh(study)
        assert study.discord_message_id == "m-1"

    async def test_reactions(self, client: AsyncClient, session, registered_user):
        study = StudySession(
            user_id=registered_user["id"],
            donation_mode="pow-art",
            start_time=START,
            end_time=START,
            discord_message_id="m-1",
        )
        session.add(study)
        await session.commit()
        await client.post(
            "/api/discord-posts",
            json={"message_id": "m-1", "channel_id": "c-1", "discord_id": registered_user["discord_id"]},
        )

        response = await client.put(
            "/api/discord-posts/reactions",
            json={"message_id": "m-1", "reaction_count": 8, "reactions": {"👍": 5, "❤️": 3}},
        )

        data = response.json()["data"]
        assert data["reaction_count"] == 8
        assert data["reactions"] == {"👍": 5, "❤️": 3}
        await session.refresh(study)
        assert study.reaction_count == 8

    async def test_reactions_unknown_post(self, client: AsyncClient):
        response = await client.put("/api/discord-posts/reactions", json={"message_id": "nope", "reaction_count": 1})

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"

    async def test_delete(self, client: AsyncClient, registered_user):
        await client.post(
            "/api/discord-posts",
            json={"message_id": "m-1", "channel_id": "c-1", "discord_id": registered_user["discord_id"]},
        )

        response = await client.delete("/api/discord-posts/m-1")

        assert response.json() == {"success": True, "message": "Discord post deleted successfully"}
        assert (await client.get("/api/discord-posts/m-1")).status_code == 404

    async def test_delete_unknown_post(self, client: AsyncClient):
        response = await client.delete("/api/discord-posts/nope")
        assert response.status_code == 200


class TestPopular:
    async def test_order_and_session_details(self, client: AsyncClient, session, registered_user):
        user_id = registered_user["id"]
        pow_session = PowSession(
            user_id=user_id,
            pow_fields="pow-art",
            start_time=START,
            end_time=START,
            duration_seconds=1800,
            duration_minutes=30,
            goal_seconds=3600,
        )
        session.add(pow_session)
        await session.commit()
        discord_id = registered_user["discord_id"]
        await client.post(
            "/api/discord-posts",
            json={"message_id": "quiet", "channel_id": "c", "discord_id": discord_id, "donation_mode": "pow-art"},
        )
        await client.post(
            "/api/discord-posts",
            json={
                "message_id": "loud",
                "channel_id": "c",
                "discord_id": discord_id,
                "session_id": pow_session.id,
                "donation_mode": "pow-art",
            },
        )
        await client.post(
            "/api/discord-posts",
            json={"message_id": "other", "channel_id": "c", "discord_id": discord_id, "donation_mode": "pow-music"},
        )
        await client.put("/api/discord-posts/reactions", json={"message_id": "loud", "reaction_count": 5})

        body = (await client.get("/api/discord-posts/popular", params={"category": "pow-art"})).json()

        assert body["count"] == 2
        first, second = body["data"]
        assert first["message_id"] == "loud"
        assert first["discord_username"] == "satoshi"
        assert (first["duration_seconds"], first["duration_minutes"]) == (1800, 30)
        assert first["achievement_rate"] == 50
        assert second["message_id"] == "quiet"
        assert second["achievement_rate"] is None

    async def test_limit_bounds(self, client: AsyncClient):
        assert (await client.get("/api/discord-posts/popular", params={"limit": 101})).status_code == 400
