"""
Conversation message models.
Everything the assistant exchanges is a message - user text, model replies,
and tool results - stored in one append-only log per user.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ..core.clock import utcnow

MessageRole = Literal["user", "assistant", "system", "tool"]


class ConversationMessage(BaseModel):
    """
    Message model for database storage.

    Append-only: created once, never updated or deleted. Ordering by
    created_at is the only ordering guarantee.
    """

    message_id: str = Field(..., description="Unique message identifier")
    user_id: str = Field(..., description="Owner of the conversation")
    role: MessageRole = Field(..., description="Message role")
    content: str = Field(default="", description="Message text or JSON tool result")
    tool_name: str | None = Field(
        default=None, description="Tool that produced this message (role='tool')"
    )
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "message_id": "msg_abc123def456",
                "user_id": "user_xyz789",
                "role": "tool",
                "content": '{"inr_amount": 1670.0, "exchange_rate": 83.5}',
                "tool_name": "currency_to_base",
                "created_at": "2025-10-05T10:15:00Z",
            }
        }

    def to_context(self) -> dict[str, str]:
        """Shape used when resending history to the model."""
        return {"role": self.role, "content": self.content}
