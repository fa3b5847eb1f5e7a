"""
Message repository for the per-user conversation log.
Append-only: messages are inserted and read, never updated or deleted.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.clock import Clock, SystemClock
from ...core.exceptions import ValidationError
from ...models.message import ConversationMessage, MessageRole

logger = structlog.get_logger()


class MessageRepository:
    """Repository for conversation message data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection, clock: Clock | None = None):
        """
        Initialize message repository.

        Args:
            collection: MongoDB collection for messages
            clock: Time source for server-assigned timestamps
        """
        self.collection = collection
        self.clock = clock or SystemClock()

    async def ensure_indexes(self) -> None:
        """
        Create indexes for optimal query performance.
        Called during application startup.
        """
        await self.collection.create_index("message_id", unique=True, name="idx_message_id")
        await self.collection.create_index(
            [("user_id", 1), ("created_at", -1)], name="idx_user_messages"
        )

        logger.info("Message indexes ensured")

    async def append(
        self,
        user_id: str,
        role: MessageRole,
        content: str,
        tool_name: str | None = None,
    ) -> str:
        """
        Persist one message with a server-assigned timestamp.

        Args:
            user_id: Conversation owner
            role: user, assistant, system or tool
            content: Message text (JSON string for tool results)
            tool_name: Tool that produced the message, for role='tool'

        Returns:
            Generated message_id

        Raises:
            ValidationError: If role is empty
        """
        if not role:
            raise ValidationError("Message role is required", user_id=user_id)

        message = ConversationMessage(
            message_id=f"msg_{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            role=role,
            content=content or "",
            tool_name=tool_name,
            created_at=self.clock.now(),
        )

        await self.collection.insert_one(message.model_dump())

        logger.info(
            "Message appended",
            message_id=message.message_id,
            user_id=user_id,
            role=role,
            tool_name=tool_name,
        )

        return message.message_id

    async def _recent(
        self, query: dict, limit: int
    ) -> list[ConversationMessage]:
        """Most recent messages matching query, returned oldest first."""
        cursor = (
            self.collection.find(query)
            # Newest first so limit keeps the tail; _id breaks timestamp ties
            .sort([("created_at", -1), ("_id", -1)])
            .limit(limit)
        )

        messages = []
        async for message_dict in cursor:
            # Remove MongoDB _id field
            message_dict.pop("_id", None)
            messages.append(ConversationMessage(**message_dict))

        messages.reverse()
        return messages

    async def load_context(self, user_id: str, limit: int = 30) -> list[dict[str, str]]:
        """
        Load the context window resent to the model.

        Returns the most recent ``limit`` non-tool messages. Tool-role
        messages are excluded since a tool message is only valid directly
        after the assistant message that requested it.

        Args:
            user_id: Conversation owner
            limit: Maximum number of messages to return

        Returns:
            List of {role, content} dicts, oldest first
        """
        messages = await self._recent(
            {"user_id": user_id, "role": {"$ne": "tool"}}, limit
        )
        context = [m.to_context() for m in messages]

        logger.debug(
            "Conversation context loaded",
            user_id=user_id,
            message_count=len(context),
        )

        return context

    async def get_history(
        self, user_id: str, limit: int = 100
    ) -> list[ConversationMessage]:
        """
        Get the most recent persisted messages, tool results included.

        Args:
            user_id: Conversation owner
            limit: Maximum number of messages to return

        Returns:
            List of messages sorted by created_at ascending
        """
        return await self._recent({"user_id": user_id}, limit)

    async def count_by_user(self, user_id: str) -> int:
        """Count messages in a user's conversation."""
        count: int = await self.collection.count_documents({"user_id": user_id})
        return count
