"""LINE adapter: text-only replies with an appended source list."""

import logging
from typing import Any, Dict, List, Union

from docchat.config import settings
from docchat.core.exceptions import UnsupportedEventError
from docchat.platforms.base import PlatformAdapter, PlatformMessage
from docchat.schemas.chat import ChatResponse
from docchat.schemas.webhook import LineWebhookBody

logger = logging.getLogger(__name__)

SOURCES_HEADER = "\n\n📄 Sumber:"
TRUNCATION_SUFFIX = "…"


class LineAdapter(PlatformAdapter):
    """
    Adapter for the LINE Messaging API.

    LINE shows plain text only, so inline ``[n]`` markers stay in the answer
    and the numbered sources are listed after it.
    """

    platform = "line"

    def __init__(self, max_text_length: int = settings.LINE_MAX_TEXT_LENGTH) -> None:
        self.max_text_length = max_text_length

    @staticmethod
    def _body(raw: Union[LineWebhookBody, Dict[str, Any]]) -> LineWebhookBody:
        if isinstance(raw, LineWebhookBody):
            return raw
        return LineWebhookBody.model_validate(raw)

    def parse_events(self, raw: Union[LineWebhookBody, Dict[str, Any]]) -> List[PlatformMessage]:
        """
        Every text message event in a webhook body, in delivery order.

        Args:
            raw: Webhook body

        Returns:
            One PlatformMessage per text event; other events are skipped
        """
        messages = []
        for event in self._body(raw).events:
            if not event.is_text_message or not event.source or not event.source.user_id:
                logger.debug(f"Skipping LINE event of type {event.type}")
                continue
            messages.append(
                PlatformMessage(
                    user_id=event.source.user_id,
                    text=event.message.text or "",
                    platform=self.platform,
                    reply_token=event.reply_token,
                )
            )
        return messages

    def parse_incoming(self, raw: Union[LineWebhookBody, Dict[str, Any]]) -> PlatformMessage:
        """
        The first text message event of a webhook body.

        Raises:
            UnsupportedEventError: If the body holds no text message event
        """
        messages = self.parse_events(raw)
        if not messages:
            raise UnsupportedEventError("Unsupported LINE event type")
        return messages[0]

    def format_text(self, response: ChatResponse) -> str:
        """Answer followed by the numbered source list, capped to the LINE limit."""
        text = response.answer
        if response.sources:
            lines = [
                f"[{i}] {source.document_title} — {source.section_title}"
                for i, source in enumerate(response.sources, start=1)
            ]
            text += SOURCES_HEADER + "\n" + "\n".join(lines)

        if len(text) > self.max_text_length:
            text = text[: self.max_text_length - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX
        return text

    def format_response(self, response: ChatResponse) -> Dict[str, str]:
        return {"type": "text", "text": self.format_text(response)}
