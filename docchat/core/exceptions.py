"""Custom exception hierarchy for retrieval, generation and platform errors."""


class RetrievalError(Exception):
    """Base exception for retrieval operations."""

    pass


class SearchError(RetrievalError):
    """Raised when full-text search over document sections fails."""

    pass


class LLMError(Exception):
    """Base exception for LLM operations."""

    pass


class LLMConnectionError(LLMError):
    """Raised when cannot connect to LLM."""

    pass


class LLMGenerationError(LLMError):
    """Raised when LLM generation fails."""

    pass


class LLMTimeoutError(LLMError):
    """Raised when LLM request times out."""

    pass


class AgentError(LLMError):
    """Base exception for the tool-calling agent."""

    pass


class ToolExecutionError(AgentError):
    """Raised when a tool call names an unknown tool or carries bad arguments."""

    pass


class PlatformError(Exception):
    """Base exception for messaging platform integration."""

    pass


class UnsupportedEventError(PlatformError):
    """Raised when a webhook event is not a text message."""

    pass


class LineReplyError(PlatformError):
    """Raised when the LINE reply API rejects a reply."""

    pass


class ConversationStoreError(Exception):
    """Raised when conversation history cannot be loaded or saved."""

    pass
