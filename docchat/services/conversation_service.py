"""Service for per-user conversation history."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.config import settings
from docchat.core.exceptions import ConversationStoreError
from docchat.models.conversation import Conversation
from docchat.schemas.chat import ChatResponse
from docchat.schemas.conversation import ConversationMessage

logger = logging.getLogger(__name__)


def trim_messages(messages: List[Dict[str, Any]], max_messages: int) -> List[Dict[str, Any]]:
    """
    Drop the oldest messages so at most ``max_messages`` remain.

    Messages are dropped in whole user/assistant pairs, so the number removed
    is always even.
    """
    excess = len(messages) - max_messages
    if excess <= 0:
        return messages
    if excess % 2:
        excess += 1
    return messages[excess:]


class ConversationService:
    """
    Service for conversation history keyed by (user id, platform).

    Responsibilities:
    - Find or start the conversation for a user on a platform
    - Expose history in the shape the model consumes
    - Append a full turn in one update, trimming old messages

    Concurrent turns for the same user are last-write-wins.
    """

    def __init__(
        self, db: AsyncSession, max_messages: int = settings.MAX_CONVERSATION_MESSAGES
    ) -> None:
        """
        Initialize conversation service.

        Args:
            db: Database session for operations
            max_messages: Cap on stored messages per conversation
        """
        self.db = db
        self.max_messages = max_messages
        self.logger = logger

    async def get_or_create_conversation(
        self, user_platform_id: str, platform: str
    ) -> Conversation:
        """
        Get the most recently updated conversation for a user, or start one.

        Args:
            user_platform_id: User identifier on the platform
            platform: Platform name (``web`` or ``line``)

        Returns:
            Existing or newly created conversation

        Raises:
            ConversationStoreError: If the database operation fails
        """
        try:
            query = (
                select(Conversation)
                .where(
                    Conversation.user_platform_id == user_platform_id,
                    Conversation.platform == platform,
                )
                .order_by(desc(Conversation.updated_at))
                .limit(1)
            )
            conversation = (await self.db.execute(query)).scalar_one_or_none()
            if conversation is not None:
                return conversation

            conversation = Conversation(
                user_platform_id=user_platform_id, platform=platform, messages=[]
            )
            self.db.add(conversation)
            await self.db.commit()
            await self.db.refresh(conversation)

        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.error(f"Failed to load conversation for {platform}:{user_platform_id}: {e}")
            raise ConversationStoreError(f"Failed to load conversation: {e}") from e

        self.logger.info(
            f"Created conversation {conversation.id} for {platform}:{user_platform_id}"
        )
        return conversation

    @staticmethod
    def get_history(conversation: Conversation) -> List[Dict[str, str]]:
        """
        Conversation messages as ``{"role", "content"}`` dicts, oldest first.

        Args:
            conversation: Conversation to read

        Returns:
            History suitable for prompts
        """
        return [
            {"role": message["role"], "content": message["content"]}
            for message in (conversation.messages or [])
        ]

    async def append_turn(
        self, conversation: Conversation, user_text: str, response: ChatResponse
    ) -> Conversation:
        """
        Append a user message and the assistant's answer in one update.

        Args:
            conversation: Conversation to update
            user_text: The user's message
            response: The assistant's response for the turn

        Returns:
            The updated conversation

        Raises:
            ConversationStoreError: If the database operation fails
        """
        now = datetime.now(timezone.utc)
        user_message = ConversationMessage(role="user", content=user_text, timestamp=now)
        assistant_message = ConversationMessage(
            role="assistant",
            content=response.answer,
            timestamp=now,
            sources=[source.section_id for source in response.sources] or None,
        )

        messages = list(conversation.messages or [])
        messages.append(user_message.model_dump(mode="json", exclude_none=True))
        messages.append(assistant_message.model_dump(mode="json", exclude_none=True))

        # Reassign so the JSON column is flagged as changed
        conversation.messages = trim_messages(messages, self.max_messages)
        conversation.updated_at = now

        try:
            await self.db.commit()
            await self.db.refresh(conversation)
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.error(f"Failed to save turn for conversation {conversation.id}: {e}")
            raise ConversationStoreError(f"Failed to save conversation: {e}") from e

        self.logger.info(
            f"Saved turn to conversation {conversation.id} "
            f"({len(conversation.messages)} messages)"
        )
        return conversation
