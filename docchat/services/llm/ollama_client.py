"""Ollama LLM API client."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from docchat.config import settings
from docchat.core.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)


class OllamaClient:
    """
    Client for Ollama LLM API.

    Handles:
    - Plain completions (``/api/generate``)
    - Chat with tool calling (``/api/chat``)
    - Error translation into the LLM exception hierarchy
    """

    def __init__(
        self,
        base_url: str = settings.OLLAMA_BASE_URL,
        model: str = settings.OLLAMA_MODEL,
        timeout: int = settings.LLM_TIMEOUT,
    ) -> None:
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama API base URL
            model: Model name to use
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.logger = logger

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload and translate transport failures."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}{path}", json=payload)
                response.raise_for_status()
                return response.json()

        except httpx.TimeoutException as e:
            self.logger.error(f"Ollama request timeout: {e}")
            raise LLMTimeoutError(f"Request timed out after {self.timeout}s") from e

        except httpx.ConnectError as e:
            self.logger.error(f"Cannot connect to Ollama: {e}")
            raise LLMConnectionError(
                f"Cannot connect to Ollama at {self.base_url}. Is Ollama running?"
            ) from e

        except httpx.HTTPStatusError as e:
            self.logger.error(f"Ollama HTTP error: {e}")
            raise LLMGenerationError(
                f"Ollama API error: {e.response.status_code}"
            ) from e

        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Ollama request failed: {e}")
            raise LLMGenerationError(f"Generation failed: {e}") from e

    async def generate(
        self,
        prompt: str,
        temperature: float = settings.LLM_TEMPERATURE,
        max_tokens: int = settings.LLM_MAX_TOKENS,
        system_prompt: Optional[str] = None,
    ) -> str:
        """
        Generate text completion from Ollama.

        Args:
            prompt: User prompt
            temperature: Sampling temperature (0.0-1.0)
            max_tokens: Max tokens to generate
            system_prompt: Optional system prompt

        Returns:
            Generated text

        Raises:
            LLMConnectionError: If cannot connect to Ollama
            LLMTimeoutError: If request times out
            LLMGenerationError: If generation fails
        """
        self.logger.info(f"Generating with Ollama model: {self.model}")

        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if system_prompt:
            payload["system"] = system_prompt

        result = await self._post("/api/generate", payload)
        generated_text = (result.get("response") or "").strip()

        if not generated_text:
            raise LLMGenerationError("Empty response from Ollama")

        self.logger.info(f"Generated {len(generated_text)} characters")
        return generated_text

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: float = settings.LLM_TEMPERATURE,
        max_tokens: int = settings.LLM_MAX_TOKENS,
    ) -> Dict[str, Any]:
        """
        Run one chat completion round, optionally offering tools.

        Args:
            messages: Chat messages (``role``/``content``, plus tool messages)
            tools: JSON-schema function definitions the model may call
            temperature: Sampling temperature (0.0-1.0)
            max_tokens: Max tokens to generate

        Returns:
            The assistant message: ``content`` and optional ``tool_calls``

        Raises:
            LLMConnectionError: If cannot connect to Ollama
            LLMTimeoutError: If request times out
            LLMGenerationError: If the response carries no message
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if tools:
            payload["tools"] = tools

        result = await self._post("/api/chat", payload)
        message = result.get("message")

        if not isinstance(message, dict):
            raise LLMGenerationError("Ollama chat response has no message")

        message.setdefault("content", "")
        message.setdefault("tool_calls", [])
        self.logger.debug(
            f"Chat round: {len(message['content'])} chars, "
            f"{len(message['tool_calls'])} tool calls"
        )
        return message

    async def health_check(self) -> bool:
        """
        Check if Ollama is running and model is available.

        Returns:
            True if healthy, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()

                data = response.json()
                models = [m.get("name", "") for m in data.get("models", [])]

                if self.model in models:
                    self.logger.info(f"Ollama healthy, model {self.model} available")
                    return True

                self.logger.warning(f"Model {self.model} not found in Ollama")
                return False

        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Ollama health check failed: {e}")
            return False
