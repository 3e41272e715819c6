"""Discord REST and webhook clients

Overview
--------
``DiscordBotClient`` posts POW cards to a channel through the bot REST API
(multipart upload with a ``payload_json`` part). ``DiscordWebhookClient``
sends embed notifications to an incoming webhook URL.

Both raise ``DiscordApiError`` on non-2xx responses or transport failures.
"""

from __future__ import annotations

import json
from typing import Optional

import httpx

from citadel_pow.core.logging_config import get_logger

from .errors import DiscordApiError
from .models import DiscordMessage, DiscordWebhookMessage

logger = get_logger(__name__)

POW_CARD_FILENAME = "pow-card.png"


class DiscordBotClient:
    """Async client for the Discord bot REST API."""

    def __init__(
        self,
        bot_token: str,
        *,
        base_url: str = "https://discord.com/api/v10",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Create a Discord bot client.

        Args:
            bot_token: Bot token sent as ``Authorization: Bot <token>``.
            base_url: Discord REST API base URL.
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.AsyncClient`` to use.
        """
        self.bot_token = bot_token
        self.base_url = base_url.rstrip("/")
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self.bot_token}"}

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send_image_message(
        self,
        channel_id: str,
        content: str,
        image: bytes,
        *,
        filename: str = POW_CARD_FILENAME,
    ) -> DiscordMessage:
        """Post ``content`` with ``image`` attached to a channel.

        API
        ---
        - Method/Path: ``POST /channels/{channel_id}/messages``
        - Body: multipart ``files[0]`` + ``payload_json``

        Raises:
            DiscordApiError: When Discord answers non-2xx or cannot be reached.
        """
        payload = {"content": content, "attachments": [{"id": 0, "filename": filename}]}
        try:
            r = await self._http.post(
                f"{self.base_url}/channels/{channel_id}/messages",
                headers=self._headers(),
                data={"payload_json": json.dumps(payload, ensure_ascii=False)},
                files={"files[0]": (filename, image, "image/png")},
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DiscordApiError(
                f"Discord message failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise DiscordApiError(f"Discord message failed: {e}") from e
        message = DiscordMessage.model_validate(r.json())
        logger.info(f"Discord message sent: channel={channel_id}, message_id={message.id}")
        return message


class DiscordWebhookClient:
    """Async sender for Discord incoming webhooks."""

    def __init__(self, webhook_url: str, *, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None) -> None:
        self.webhook_url = webhook_url
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send(self, message: DiscordWebhookMessage) -> None:
        """POST ``message`` to the webhook URL.

        Raises:
            DiscordApiError: When the webhook answers non-2xx or cannot be reached.
        """
        try:
            r = await self._http.post(self.webhook_url, json=message.to_payload())
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DiscordApiError(
                f"Discord webhook failed: {e.response.text}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise DiscordApiError(f"Discord webhook failed: {e}") from e
