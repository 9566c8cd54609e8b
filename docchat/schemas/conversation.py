"""Schemas for stored conversation messages."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ConversationMessage(BaseModel):
    """Single message in a stored conversation history."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sources: Optional[List[str]] = None  # section ids used for the answer
