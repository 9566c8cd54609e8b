"""API tests for the LINE webhook."""

import json

import pytest
from httpx import AsyncClient

from docchat.api.webhook import MESSAGE_TOO_LONG_REPLY
from docchat.core.exceptions import LineReplyError, LLMTimeoutError
from docchat.core.security import compute_line_signature
from docchat.services.conversation_service import ConversationService
from docchat.services.greeting import GREETING_RESPONSES
from tests.utils import (
    TEST_CHANNEL_SECRET,
    assert_valid_response,
    line_event,
    signed_line_request,
)


@pytest.mark.api
@pytest.mark.asyncio
class TestLineSignature:
    """Test webhook authentication."""

    async def test_invalid_signature_returns_401(
        self, async_client: AsyncClient, mock_line_reply
    ):
        request = signed_line_request([line_event()], secret="wrong-secret")

        response = await async_client.post("/webhook/line", **request)

        assert_valid_response(response, 401)
        assert response.json() == {"error": "Invalid signature"}
        mock_line_reply.assert_not_called()

    async def test_missing_signature_returns_401(self, async_client: AsyncClient):
        response = await async_client.post(
            "/webhook/line",
            content=json.dumps({"events": []}).encode(),
            headers={"Content-Type": "application/json"},
        )

        assert_valid_response(response, 401)

    async def test_empty_event_list_is_acknowledged(self, async_client: AsyncClient):
        """LINE verifies webhook URLs with an empty, signed body."""
        response = await async_client.post("/webhook/line", **signed_line_request([]))

        assert_valid_response(response, 200)
        assert response.json() == {"ok": True}

    async def test_malformed_body_is_acknowledged(
        self, async_client: AsyncClient, mock_line_reply
    ):
        body = b"not json"
        response = await async_client.post(
            "/webhook/line",
            content=body,
            headers={"X-Line-Signature": compute_line_signature(body, TEST_CHANNEL_SECRET)},
        )

        assert_valid_response(response, 200)
        assert response.json() == {"ok": True}
        mock_line_reply.assert_not_called()


@pytest.mark.api
@pytest.mark.asyncio
class TestLineWebhook:
    """Test answering LINE message events."""

    async def test_text_message_gets_reply_with_sources(
        self, async_client: AsyncClient, mock_ollama, mock_line_reply, seeded_documents
    ):
        event = line_event("Kapan batas pengajuan kegiatan?", user_id="U100", reply_token="rt-1")

        response = await async_client.post("/webhook/line", **signed_line_request([event]))

        assert_valid_response(response, 200)
        assert response.json() == {"ok": True}
        mock_line_reply.assert_awaited_once()
        reply_token, messages = mock_line_reply.await_args.args
        assert reply_token == "rt-1"
        assert messages == [
            {
                "type": "text",
                "text": (
                    "Pengajuan kegiatan butuh 14 hari [1].\n\n📄 Sumber:\n"
                    "[1] Pedoman Kegiatan — Pengajuan Kegiatan\n"
                    "[2] Pedoman Kegiatan — Laporan Kegiatan"
                ),
            }
        ]

    async def test_greeting_reply_has_no_sources(
        self, async_client: AsyncClient, mock_ollama, mock_line_reply
    ):
        event = line_event("Selamat pagi", reply_token="rt-2")

        await async_client.post("/webhook/line", **signed_line_request([event]))

        _, messages = mock_line_reply.await_args.args
        assert messages[0]["text"] in GREETING_RESPONSES
        mock_ollama.assert_not_called()

    async def test_non_text_events_are_ignored(
        self, async_client: AsyncClient, mock_ollama, mock_line_reply
    ):
        events = [
            line_event(message_type="sticker"),
            {"type": "follow", "source": {"type": "user", "userId": "U5"}, "replyToken": "r"},
        ]

        response = await async_client.post("/webhook/line", **signed_line_request(events))

        assert_valid_response(response, 200)
        mock_line_reply.assert_not_called()
        mock_ollama.assert_not_called()

    async def test_every_text_event_is_answered(
        self, async_client: AsyncClient, mock_line_reply
    ):
        events = [
            line_event("Halo", reply_token="rt-a"),
            line_event("Terima kasih", reply_token="rt-b"),
        ]

        await async_client.post("/webhook/line", **signed_line_request(events))

        tokens = [call.args[0] for call in mock_line_reply.await_args_list]
        assert tokens == ["rt-a", "rt-b"]

    async def test_too_long_message_gets_fixed_reply(
        self, async_client: AsyncClient, mock_ollama, mock_line_reply
    ):
        event = line_event("x" * 2001, reply_token="rt-3")

        response = await async_client.post("/webhook/line", **signed_line_request([event]))

        assert_valid_response(response, 200)
        mock_line_reply.assert_awaited_once_with(
            "rt-3", [{"type": "text", "text": MESSAGE_TOO_LONG_REPLY}]
        )
        mock_ollama.assert_not_called()

    async def test_answer_failure_still_acknowledges(
        self, async_client: AsyncClient, mock_ollama, mock_line_reply, seeded_documents
    ):
        """Errors never surface as non-2xx, or LINE would redeliver the event."""
        mock_ollama.side_effect = LLMTimeoutError("slow")
        event = line_event("Apa syarat pengajuan kegiatan?")

        response = await async_client.post("/webhook/line", **signed_line_request([event]))

        assert_valid_response(response, 200)
        assert response.json() == {"ok": True}
        mock_line_reply.assert_not_called()

    async def test_reply_failure_still_acknowledges(
        self, async_client: AsyncClient, mock_line_reply
    ):
        mock_line_reply.side_effect = LineReplyError("expired reply token")

        response = await async_client.post(
            "/webhook/line", **signed_line_request([line_event("Halo")])
        )

        assert_valid_response(response, 200)

    async def test_turn_is_stored_per_line_user(
        self, async_client: AsyncClient, test_db, mock_line_reply
    ):
        await async_client.post(
            "/webhook/line", **signed_line_request([line_event("Halo", user_id="U777")])
        )

        conversation = await ConversationService(test_db).get_or_create_conversation(
            "U777", "line"
        )
        assert [m["content"] for m in conversation.messages][0] == "Halo"
        assert len(conversation.messages) == 2
