"""Conversation model: one message history per user and platform."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Index, String, Uuid, func

from docchat.database import Base


class Conversation(Base):
    """
    Stored chat history for a (user, platform) pair.

    Messages are kept inline as a JSON list of
    ``{"role", "content", "timestamp", "sources"}`` dicts, oldest first.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_user_platform", "user_platform_id", "platform"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_platform_id = Column(String(255), nullable=False)
    platform = Column(String(20), nullable=False)
    messages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Conversation {self.id} {self.platform}:{self.user_platform_id}>"
