"""LINE Messaging API webhook."""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from docchat.api.deps import (
    get_conversation_service,
    get_line_adapter,
    get_line_client,
    get_orchestrator,
)
from docchat.config import settings
from docchat.core.error_handler import record_error, request_context_for
from docchat.core.logging_config import LogContext
from docchat.core.security import verify_line_signature
from docchat.platforms import LineAdapter, PlatformMessage
from docchat.schemas.webhook import LineWebhookBody
from docchat.services.conversation_service import ConversationService
from docchat.services.line_messaging import LineMessagingClient
from docchat.services.metrics import webhook_events_total
from docchat.services.router import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])

MESSAGE_TOO_LONG_REPLY = (
    "Maaf, pesan terlalu panjang. Mohon kirim pesan yang lebih singkat "
    f"(maks. {settings.MAX_MESSAGE_LENGTH} karakter)."
)

# LINE retries on any non-2xx, so everything past the signature check is 200
OK_BODY = {"ok": True}


async def handle_line_message(
    message: PlatformMessage,
    adapter: LineAdapter,
    orchestrator: ChatOrchestrator,
    conversations: ConversationService,
    line_client: LineMessagingClient,
) -> str:
    """
    Answer one LINE text message and reply to it.

    Returns:
        Outcome label for metrics
    """
    if len(message.text) > settings.MAX_MESSAGE_LENGTH:
        await line_client.reply(
            message.reply_token, [{"type": "text", "text": MESSAGE_TOO_LONG_REPLY}]
        )
        return "too_long"

    conversation = await conversations.get_or_create_conversation(
        message.user_id, message.platform
    )
    history = conversations.get_history(conversation)

    response = await orchestrator.route_message(
        message.text, history, platform=message.platform
    )
    await conversations.append_turn(conversation, message.text, response)

    await line_client.reply(message.reply_token, [adapter.format_response(response)])
    return "replied"


@router.post("/line")
async def line_webhook(
    request: Request,
    adapter: LineAdapter = Depends(get_line_adapter),
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
    conversations: ConversationService = Depends(get_conversation_service),
    line_client: LineMessagingClient = Depends(get_line_client),
) -> JSONResponse:
    """
    Receive LINE webhook events.

    The ``X-Line-Signature`` header must match the raw body. Each text
    message event is answered through the reply API; other events are
    ignored.

    Returns:
        401 on a bad signature, otherwise ``{"ok": true}``
    """
    raw_body = await request.body()
    signature = request.headers.get("X-Line-Signature", "")

    if not verify_line_signature(raw_body, signature, settings.LINE_CHANNEL_SECRET):
        webhook_events_total.labels(outcome="invalid_signature").inc()
        logger.warning("Rejected LINE webhook with invalid signature")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid signature"},
        )

    try:
        body = LineWebhookBody.model_validate(json.loads(raw_body))
    except (ValueError, ValidationError) as e:
        webhook_events_total.labels(outcome="malformed").inc()
        logger.warning(f"Ignoring malformed LINE webhook body: {e}")
        return JSONResponse(content=OK_BODY)

    messages = adapter.parse_events(body)
    skipped = len(body.events) - len(messages)
    if skipped:
        webhook_events_total.labels(outcome="skipped").inc(skipped)

    for message in messages:
        with LogContext(user_id=message.user_id):
            try:
                outcome = await handle_line_message(
                    message, adapter, orchestrator, conversations, line_client
                )
            except Exception as e:
                outcome = "failed"
                record_error(e, request_context_for(request))
                logger.error(
                    f"LINE event failed for user {message.user_id}: {e}",
                    exc_info=True,
                )
        webhook_events_total.labels(outcome=outcome).inc()

    return JSONResponse(content=OK_BODY)
