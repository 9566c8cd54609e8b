"""Tool-calling document agent."""

import logging
import time
from typing import Any, Dict, List, Optional

from docchat.config import settings
from docchat.core.exceptions import AgentError
from docchat.schemas.chat import ChatResponse
from docchat.schemas.tools import SearchFound
from docchat.services.agent.tools import DocumentTools, ToolExecution
from docchat.services.citations import SourceRegistry, parse_citations
from docchat.services.llm.ollama_client import OllamaClient
from docchat.services.llm.prompt_builder import PromptBuilder
from docchat.services.metrics import generation_duration_seconds

logger = logging.getLogger(__name__)


class DocumentAgent:
    """
    Agent where the model decides when to search or read documents.

    Every search result is merged into a per-turn ``SourceRegistry`` after the
    call completes and the hits shown to the model carry their registry
    numbers, so ``[src:N]`` in the final answer resolves against the same
    numbering the parser uses.
    """

    def __init__(
        self,
        llm_client: OllamaClient,
        tools: DocumentTools,
        prompt_builder: PromptBuilder,
        max_tool_rounds: int = settings.AGENT_MAX_TOOL_ROUNDS,
    ) -> None:
        """
        Initialize the agent.

        Args:
            llm_client: LLM client with chat/tool support
            tools: Tool executor
            prompt_builder: Prompt builder for the system prompt and history
            max_tool_rounds: Rounds that may request tools before a forced answer
        """
        self.llm_client = llm_client
        self.tools = tools
        self.prompt_builder = prompt_builder
        self.max_tool_rounds = max_tool_rounds
        self.logger = logger

    def _initial_messages(
        self, question: str, history: Optional[List[Dict[str, str]]]
    ) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": self.prompt_builder.build_agent_system_prompt()},
            *self.prompt_builder.format_history(history),
            {"role": "user", "content": question},
        ]

    @staticmethod
    def _tool_message(execution: ToolExecution) -> Dict[str, Any]:
        return {
            "role": "tool",
            "tool_name": execution.name,
            "content": execution.result.model_dump_json(by_alias=True),
        }

    async def _run_tool_calls(
        self, tool_calls: List[Dict[str, Any]], registry: SourceRegistry
    ) -> List[Dict[str, Any]]:
        """Execute requested calls in order, merging collected passages."""
        tool_messages = []
        for call in tool_calls:
            function = call.get("function") or {}
            execution = await self.tools.execute(
                function.get("name", ""), function.get("arguments")
            )

            if execution.collected:
                numbers = registry.merge(execution.collected)
                if isinstance(execution.result, SearchFound):
                    execution.result = execution.result.with_indices(numbers)

            tool_messages.append(self._tool_message(execution))
        return tool_messages

    async def run(
        self,
        question: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> ChatResponse:
        """
        Answer a question, letting the model call tools as needed.

        Args:
            question: User's question
            history: Prior conversation messages, oldest first

        Returns:
            ChatResponse whose sources are every passage surfaced this turn

        Raises:
            AgentError: If the model never produces an answer
            SearchError: If retrieval fails inside a tool call
            LLMError: If the LLM call fails
        """
        registry = SourceRegistry()
        messages = self._initial_messages(question, history)
        answer: Optional[str] = None

        start = time.time()
        for round_number in range(1, self.max_tool_rounds + 1):
            reply = await self.llm_client.chat(messages, tools=self.tools.definitions)
            tool_calls = reply.get("tool_calls") or []

            if not tool_calls:
                answer = reply.get("content", "")
                break

            self.logger.info(f"Agent round {round_number}: {len(tool_calls)} tool calls")
            messages.append(
                {
                    "role": "assistant",
                    "content": reply.get("content", ""),
                    "tool_calls": tool_calls,
                }
            )
            messages.extend(await self._run_tool_calls(tool_calls, registry))
        else:
            # Out of tool rounds: ask for an answer with tools withdrawn
            reply = await self.llm_client.chat(messages)
            answer = reply.get("content", "")

        generation_duration_seconds.labels(mode="agent").observe(time.time() - start)

        if not answer or not answer.strip():
            raise AgentError("Agent finished without an answer")

        parsed = parse_citations(answer.strip(), registry.sources)

        self.logger.info(
            f"Agent answer: {len(parsed.answer)} chars, "
            f"{len(parsed.citations)} citations, {len(registry)} sources, "
            f"has_citations={parsed.has_citations}"
        )

        return ChatResponse(
            answer=parsed.answer,
            citations=parsed.citations,
            sources=registry.sources,
            has_citations=parsed.has_citations,
        )
