"""Base interface for presentation-layer platform adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from docchat.schemas.chat import ChatResponse


@dataclass(frozen=True)
class PlatformMessage:
    """An inbound user message normalized across platforms."""

    user_id: str
    text: str
    platform: str
    reply_token: Optional[str] = None


class PlatformAdapter(ABC):
    """
    Converts between a platform's wire format and the chat core.

    Subclasses parse the platform's inbound payload into a
    ``PlatformMessage`` and render a ``ChatResponse`` for the platform.
    """

    platform: str

    @abstractmethod
    def parse_incoming(self, raw: Any) -> PlatformMessage:
        """Normalize an inbound payload."""
        pass

    @abstractmethod
    def format_response(self, response: ChatResponse) -> Any:
        """Render a turn result for the platform."""
        pass
