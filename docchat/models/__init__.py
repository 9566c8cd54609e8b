"""SQLAlchemy ORM models."""

from docchat.models.conversation import Conversation
from docchat.models.document import Document, DocumentSection

__all__ = ["Conversation", "Document", "DocumentSection"]
