"""Turn orchestration: greeting fast path or the configured answer mode."""

import logging
from typing import Dict, List, Optional

from docchat.config import settings
from docchat.schemas.chat import ChatResponse
from docchat.services.agent import DocumentAgent
from docchat.services.greeting import handle_greeting
from docchat.services.llm.answer_generator import AnswerGenerator
from docchat.services.metrics import (
    chat_turns_total,
    citation_fallbacks_total,
    citations_generated_total,
)
from docchat.services.router.message_classifier import MessageRoute, classify_message

logger = logging.getLogger(__name__)


class ChatOrchestrator:
    """
    Routes one user message to the handler that answers it.

    Greetings take the fast path. Everything else goes to the retrieve-then-
    generate pipeline or the tool-calling agent depending on ``mode``.
    Collaborator failures propagate to the request boundary.
    """

    def __init__(
        self,
        answer_generator: Optional[AnswerGenerator] = None,
        agent: Optional[DocumentAgent] = None,
        mode: str = settings.CHAT_MODE,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            answer_generator: Pipeline handler (required in ``pipeline`` mode)
            agent: Agent handler (required in ``agent`` mode)
            mode: ``pipeline`` or ``agent``
        """
        if mode not in ("pipeline", "agent"):
            raise ValueError(f"Unknown chat mode: {mode}")
        if mode == "pipeline" and answer_generator is None:
            raise ValueError("pipeline mode requires an AnswerGenerator")
        if mode == "agent" and agent is None:
            raise ValueError("agent mode requires a DocumentAgent")

        self.answer_generator = answer_generator
        self.agent = agent
        self.mode = mode
        self.logger = logger

    async def route_message(
        self,
        text: str,
        history: Optional[List[Dict[str, str]]] = None,
        platform: str = "web",
    ) -> ChatResponse:
        """
        Answer one message.

        Args:
            text: User message
            history: Prior conversation messages, oldest first
            platform: Originating platform, for metrics

        Returns:
            ChatResponse for the turn
        """
        route = classify_message(text)

        if route is MessageRoute.GREETING:
            response = handle_greeting(text)
            label = route.value
        elif self.mode == "agent":
            response = await self.agent.run(text, history)
            label = "agent"
        else:
            response = await self.answer_generator.generate_answer(text, history)
            label = "pipeline"

        chat_turns_total.labels(route=label, platform=platform).inc()
        citations_generated_total.inc(len(response.citations))
        if response.sources and not response.has_citations:
            citation_fallbacks_total.inc()

        self.logger.info(
            f"Routed {platform} message via {label}: "
            f"{len(response.sources)} sources, has_citations={response.has_citations}",
            extra={"route": label},
        )
        return response
