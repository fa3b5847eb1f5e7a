"""API request/response schemas."""

from .chat_models import ChatHistoryResponse, ChatRequest, ChatResponse

__all__ = [
    "ChatHistoryResponse",
    "ChatRequest",
    "ChatResponse",
]
