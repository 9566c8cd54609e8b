"""Web chat adapter: full structured responses."""

from typing import Any, Dict, Union

from docchat.platforms.base import PlatformAdapter, PlatformMessage
from docchat.schemas.chat import ChatRequest, ChatResponse

ANONYMOUS_USER = "anonymous"


class WebAdapter(PlatformAdapter):
    """Rich clients render citations themselves, so responses pass through."""

    platform = "web"

    def parse_incoming(self, raw: Union[ChatRequest, Dict[str, Any]]) -> PlatformMessage:
        request = raw if isinstance(raw, ChatRequest) else ChatRequest.model_validate(raw)
        return PlatformMessage(
            user_id=request.user_id or ANONYMOUS_USER,
            text=request.message or "",
            platform=self.platform,
        )

    def format_response(self, response: ChatResponse) -> ChatResponse:
        return response
