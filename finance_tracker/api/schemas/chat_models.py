"""
Request/Response models for chat API endpoints.
"""

from pydantic import BaseModel, Field

from ...models.message import ConversationMessage

# ===== Request Models =====


class ChatRequest(BaseModel):
    """Chat request from user."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Free-text message for the financial assistant",
    )

    class Config:
        json_schema_extra = {"example": {"message": "I spent 20 dollars on coffee"}}


# ===== Response Models =====


class ChatResponse(BaseModel):
    """Final assistant answer for one turn."""

    message: str = Field(..., description="Assistant answer or fallback text")

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Recorded ₹1670.00 (20 USD) for Coffee Shop under Food & Dining."
            }
        }


class ChatHistoryResponse(BaseModel):
    """Persisted conversation log, oldest first."""

    messages: list[ConversationMessage]
    total: int = Field(..., description="Total messages stored for the user")
