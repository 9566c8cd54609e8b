"""Web chat endpoint."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from docchat.api.deps import (
    get_conversation_service,
    get_orchestrator,
    get_web_adapter,
)
from docchat.config import settings
from docchat.core.decorators import rate_limit
from docchat.core.error_handler import record_error, request_context_for
from docchat.core.logging_config import LogContext
from docchat.platforms import WebAdapter
from docchat.schemas.chat import ChatRequest, ChatResponse
from docchat.services.conversation_service import ConversationService
from docchat.services.router import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

INTERNAL_ERROR_ANSWER = "Maaf, terjadi kesalahan internal. Silakan coba lagi."


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@router.post("/chat", response_model=ChatResponse)
@rate_limit(
    limit=settings.CHAT_RATE_LIMIT,
    window=settings.CHAT_RATE_LIMIT_WINDOW,
    scope="ip",
)
async def chat(
    payload: ChatRequest,
    request: Request,
    adapter: WebAdapter = Depends(get_web_adapter),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
    conversations: ConversationService = Depends(get_conversation_service),
):
    """
    Answer one web chat message.

    Loads the user's web conversation for context, routes the message, stores
    the turn and returns the structured response with citations.

    Args:
        payload: Chat request (``message``, optional ``userId``)
        request: FastAPI request
        adapter: Web platform adapter
        orchestrator: Turn orchestrator for the configured chat mode
        conversations: Conversation store

    Returns:
        ChatResponse, 400 for invalid messages, or 500 with a fixed apology
    """
    if not payload.message or not payload.message.strip():
        return _bad_request("message is required")

    if len(payload.message) > settings.MAX_MESSAGE_LENGTH:
        return _bad_request(
            f"message too long (max {settings.MAX_MESSAGE_LENGTH} characters)"
        )

    message = adapter.parse_incoming(payload)

    with LogContext(user_id=message.user_id):
        try:
            conversation = await conversations.get_or_create_conversation(
                message.user_id, message.platform
            )
            history = conversations.get_history(conversation)

            response = await orchestrator.route_message(
                message.text, history, platform=message.platform
            )

            await conversations.append_turn(conversation, message.text, response)

        except Exception as e:
            record_error(e, request_context_for(request))
            logger.error(
                f"Chat turn failed for user {message.user_id}: {e}", exc_info=True
            )
            fallback = ChatResponse(answer=INTERNAL_ERROR_ANSWER)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=fallback.model_dump(by_alias=True),
            )

    return adapter.format_response(response)
