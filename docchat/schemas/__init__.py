"""Pydantic schemas for request/response validation."""

from docchat.schemas.chat import ChatRequest, ChatResponse, Citation, Source

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "Citation",
    "Source",
]
