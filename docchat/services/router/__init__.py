"""Message classification and turn orchestration."""

from docchat.services.router.message_classifier import (
    MessageRoute,
    classify_message,
    is_greeting,
)
from docchat.services.router.orchestrator import ChatOrchestrator

__all__ = ["ChatOrchestrator", "MessageRoute", "classify_message", "is_greeting"]
