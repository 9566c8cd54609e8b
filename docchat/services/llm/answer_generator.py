"""Retrieve-then-generate answer pipeline."""

import logging
import time
from typing import Dict, List, Optional

from docchat.config import settings
from docchat.schemas.chat import ChatResponse
from docchat.services.citations import SourceRegistry, parse_citations
from docchat.services.llm.ollama_client import OllamaClient
from docchat.services.llm.prompt_builder import PromptBuilder
from docchat.services.metrics import generation_duration_seconds
from docchat.services.search_service import SearchService

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = (
    "Maaf, saya tidak menemukan informasi yang relevan dengan pertanyaan Anda "
    f"di database {settings.ORGANIZATION_NAME}. Silakan coba pertanyaan lain atau "
    f"hubungi pengurus {settings.ORGANIZATION_NAME} secara langsung."
)


class AnswerGenerator:
    """
    Deterministic pipeline producing a cited answer.

    Pipeline:
    1. Retrieve sections for the question
    2. Register them in a fresh per-turn source registry
    3. Build the numbered-source prompt
    4. Call the LLM
    5. Reconcile ``[src:N]`` markers into display citations
    """

    def __init__(
        self,
        search_service: SearchService,
        llm_client: OllamaClient,
        prompt_builder: PromptBuilder,
        search_limit: int = settings.SEARCH_RESULT_LIMIT,
    ) -> None:
        """
        Initialize answer generator.

        Args:
            search_service: Retrieval collaborator
            llm_client: LLM client instance
            prompt_builder: Prompt builder instance
            search_limit: Number of sections to retrieve
        """
        self.search_service = search_service
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder
        self.search_limit = search_limit
        self.logger = logger

    async def generate_answer(
        self,
        question: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> ChatResponse:
        """
        Answer a question from retrieved document sections.

        Args:
            question: User's question
            history: Prior conversation messages, oldest first

        Returns:
            ChatResponse with citations, or the fixed not-found answer when
            retrieval comes back empty

        Raises:
            SearchError: If retrieval fails
            LLMError: If generation fails
        """
        self.logger.info(f"Generating answer for query: '{question}'")

        results = await self.search_service.search_sections(question, self.search_limit)
        registry = SourceRegistry(results)

        if not registry:
            self.logger.info("No relevant sections found, skipping generation")
            return ChatResponse(answer=NO_RESULTS_ANSWER)

        prompt = self.prompt_builder.build_knowledge_prompt(
            registry.sources, question, history
        )

        start = time.time()
        raw_answer = await self.llm_client.generate(prompt=prompt)
        generation_duration_seconds.labels(mode="pipeline").observe(time.time() - start)

        parsed = parse_citations(raw_answer, registry.sources)

        self.logger.info(
            f"Answer generated: {len(parsed.answer)} chars, "
            f"{len(parsed.citations)} citations, {len(registry)} sources, "
            f"has_citations={parsed.has_citations}"
        )

        return ChatResponse(
            answer=parsed.answer,
            citations=parsed.citations,
            sources=registry.sources,
            has_citations=parsed.has_citations,
        )
