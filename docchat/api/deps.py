"""API dependencies: per-request service wiring."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.config import settings
from docchat.database import get_db
from docchat.platforms import LineAdapter, WebAdapter
from docchat.services.agent import DocumentAgent, DocumentTools
from docchat.services.conversation_service import ConversationService
from docchat.services.document_service import DocumentService
from docchat.services.line_messaging import LineMessagingClient
from docchat.services.llm.answer_generator import AnswerGenerator
from docchat.services.llm.ollama_client import OllamaClient
from docchat.services.llm.prompt_builder import PromptBuilder
from docchat.services.router import ChatOrchestrator
from docchat.services.search_service import SearchService


def get_llm_client() -> OllamaClient:
    return OllamaClient()


def get_line_client() -> LineMessagingClient:
    return LineMessagingClient()


def get_web_adapter() -> WebAdapter:
    return WebAdapter()


def get_line_adapter() -> LineAdapter:
    return LineAdapter()


def get_conversation_service(db: AsyncSession = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    llm_client: OllamaClient = Depends(get_llm_client),
) -> ChatOrchestrator:
    """
    Build the orchestrator for the configured chat mode.

    Args:
        db: Database session shared by the retrieval collaborators
        llm_client: LLM client

    Returns:
        ChatOrchestrator wired with the pipeline or the agent
    """
    search_service = SearchService(db)
    prompt_builder = PromptBuilder()

    if settings.CHAT_MODE == "agent":
        tools = DocumentTools(search_service, DocumentService(db))
        agent = DocumentAgent(llm_client, tools, prompt_builder)
        return ChatOrchestrator(agent=agent, mode="agent")

    generator = AnswerGenerator(search_service, llm_client, prompt_builder)
    return ChatOrchestrator(answer_generator=generator, mode="pipeline")
