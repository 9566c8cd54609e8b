"""LINE Messaging API reply client."""

import logging
from typing import Any, Dict, List

import httpx

from docchat.config import settings
from docchat.core.exceptions import LineReplyError

logger = logging.getLogger(__name__)


class LineMessagingClient:
    """Sends replies to LINE users through the reply endpoint."""

    def __init__(
        self,
        access_token: str = settings.LINE_CHANNEL_ACCESS_TOKEN,
        base_url: str = settings.LINE_API_BASE_URL,
        timeout: int = settings.LINE_REPLY_TIMEOUT,
    ) -> None:
        """
        Initialize the client.

        Args:
            access_token: Channel access token
            base_url: LINE API base URL
            timeout: Request timeout in seconds
        """
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger

    async def reply(self, reply_token: str, messages: List[Dict[str, Any]]) -> None:
        """
        Reply to a webhook event.

        Args:
            reply_token: Token from the webhook event (single use)
            messages: LINE message objects, e.g. ``{"type": "text", "text": ...}``

        Raises:
            LineReplyError: If the request fails or LINE rejects it
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/v2/bot/message/reply",
                    headers={"Authorization": f"Bearer {self.access_token}"},
                    json={"replyToken": reply_token, "messages": messages},
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            self.logger.error(
                f"LINE reply rejected: {e.response.status_code} {e.response.text}"
            )
            raise LineReplyError(
                f"LINE reply API error: {e.response.status_code}"
            ) from e

        except httpx.HTTPError as e:
            self.logger.error(f"LINE reply failed: {e}")
            raise LineReplyError(f"LINE reply failed: {e}") from e

        self.logger.info(f"Sent {len(messages)} LINE message(s)")
