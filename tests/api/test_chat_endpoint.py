"""API tests for the web chat endpoint."""

import pytest
from httpx import AsyncClient

from docchat.api.chat import INTERNAL_ERROR_ANSWER
from docchat.core.exceptions import LLMConnectionError
from docchat.services.conversation_service import ConversationService
from docchat.services.greeting import GREETING_RESPONSES
from docchat.services.llm.answer_generator import NO_RESULTS_ANSWER
from tests.utils import assert_offsets_exact_json, assert_valid_response


@pytest.mark.api
@pytest.mark.asyncio
class TestChatValidation:
    """Test request validation."""

    @pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
    async def test_missing_message_returns_400(
        self, async_client: AsyncClient, mock_ollama, payload
    ):
        response = await async_client.post("/api/chat", json=payload)

        assert_valid_response(response, 400)
        assert response.json() == {"error": "message is required"}
        mock_ollama.assert_not_called()

    async def test_too_long_message_returns_400(self, async_client: AsyncClient, mock_ollama):
        response = await async_client.post("/api/chat", json={"message": "a" * 2001})

        assert_valid_response(response, 400)
        assert response.json() == {"error": "message too long (max 2000 characters)"}

    async def test_message_at_limit_is_accepted(
        self, async_client: AsyncClient, mock_ollama, seeded_documents
    ):
        response = await async_client.post("/api/chat", json={"message": "b" * 2000})

        assert_valid_response(response, 200)


@pytest.mark.api
@pytest.mark.asyncio
class TestChatEndpoint:
    """Test answering through POST /api/chat."""

    async def test_cited_answer_contract(
        self, async_client: AsyncClient, mock_ollama, seeded_documents
    ):
        """Response is camelCase with exact citation offsets."""
        response = await async_client.post(
            "/api/chat",
            json={"message": "Berapa hari batas pengajuan kegiatan?", "userId": "web-1"},
        )

        assert_valid_response(response, 200)
        data = response.json()
        assert set(data) == {"answer", "citations", "sources", "hasCitations"}
        assert data["answer"] == "Pengajuan kegiatan butuh 14 hari [1]."
        assert data["hasCitations"] is True
        assert data["citations"] == [
            {"sourceIndex": 0, "startOffset": 33, "endOffset": 36, "marker": "[1]"}
        ]
        assert_offsets_exact_json(data)

        first_source = data["sources"][0]
        assert set(first_source) == {
            "sectionId",
            "documentTitle",
            "sectionTitle",
            "docType",
            "content",
            "relevanceScore",
        }
        assert first_source["documentTitle"] == "Pedoman Kegiatan"
        assert first_source["sectionTitle"] == "Pengajuan Kegiatan"

    async def test_greeting_skips_generation(
        self, async_client: AsyncClient, mock_ollama
    ):
        response = await async_client.post("/api/chat", json={"message": "Halo!"})

        assert_valid_response(response, 200)
        data = response.json()
        assert data["answer"] in GREETING_RESPONSES
        assert data["citations"] == []
        assert data["sources"] == []
        assert data["hasCitations"] is False
        mock_ollama.assert_not_called()

    async def test_no_results_answer(
        self, async_client: AsyncClient, mock_ollama, seeded_documents
    ):
        response = await async_client.post(
            "/api/chat", json={"message": "Bagaimana cara mendaftar beasiswa?"}
        )

        assert_valid_response(response, 200)
        assert response.json()["answer"] == NO_RESULTS_ANSWER
        mock_ollama.assert_not_called()

    async def test_uncited_answer_is_fallback(
        self, async_client: AsyncClient, mock_ollama, seeded_documents
    ):
        mock_ollama.return_value = "Laporan diserahkan 7 hari setelah kegiatan."

        response = await async_client.post(
            "/api/chat", json={"message": "Kapan laporan kegiatan?"}
        )

        data = response.json()
        assert data["hasCitations"] is False
        assert data["citations"] == []
        assert data["sources"]
        assert data["answer"] == "Laporan diserahkan 7 hari setelah kegiatan."

    async def test_llm_failure_returns_apology(
        self, async_client: AsyncClient, mock_ollama, seeded_documents
    ):
        mock_ollama.side_effect = LLMConnectionError("Ollama is down")

        response = await async_client.post(
            "/api/chat", json={"message": "Apa syarat pengajuan kegiatan?"}
        )

        assert_valid_response(response, 500)
        assert response.json() == {
            "answer": INTERNAL_ERROR_ANSWER,
            "citations": [],
            "sources": [],
            "hasCitations": False,
        }

    async def test_turns_are_stored_and_used_as_history(
        self, async_client: AsyncClient, test_db, mock_ollama, seeded_documents
    ):
        await async_client.post(
            "/api/chat", json={"message": "Apa syarat pengajuan kegiatan?", "userId": "web-7"}
        )
        await async_client.post(
            "/api/chat", json={"message": "Kalau laporan kegiatan?", "userId": "web-7"}
        )

        conversation = await ConversationService(test_db).get_or_create_conversation(
            "web-7", "web"
        )
        assert [m["role"] for m in conversation.messages] == [
            "user",
            "assistant",
            "user",
            "assistant",
        ]
        assert conversation.messages[0]["content"] == "Apa syarat pengajuan kegiatan?"

        second_prompt = mock_ollama.await_args.kwargs["prompt"]
        assert "Pengguna: Apa syarat pengajuan kegiatan?" in second_prompt
        assert "Asisten: Pengajuan kegiatan butuh 14 hari [1]." in second_prompt

    async def test_anonymous_users_share_a_conversation(
        self, async_client: AsyncClient, test_db, mock_ollama
    ):
        await async_client.post("/api/chat", json={"message": "Halo"})

        conversation = await ConversationService(test_db).get_or_create_conversation(
            "anonymous", "web"
        )
        assert len(conversation.messages) == 2


@pytest.mark.api
@pytest.mark.asyncio
class TestChatCors:
    """Test CORS scoping."""

    async def test_preflight_allowed_for_frontend_origin(self, async_client: AsyncClient):
        response = await async_client.options(
            "/api/chat",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    async def test_other_origins_not_allowed(self, async_client: AsyncClient):
        response = await async_client.options(
            "/api/chat",
            headers={
                "Origin": "https://evil.example",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert "access-control-allow-origin" not in response.headers

    async def test_health_has_no_cors_headers(self, async_client: AsyncClient):
        response = await async_client.get(
            "/health", headers={"Origin": "http://localhost:5173"}
        )

        assert "access-control-allow-origin" not in response.headers
