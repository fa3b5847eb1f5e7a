"""
Chat API endpoints for the financial assistant.
"""

import structlog
from fastapi import APIRouter, Depends, Query

from ..agent.finance_agent import FinanceAgent
from ..database.repositories.message_repository import MessageRepository
from .dependencies.auth import get_current_user_id
from .dependencies.chat_deps import get_finance_agent, get_message_repository
from .schemas.chat_models import ChatHistoryResponse, ChatRequest, ChatResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    agent: FinanceAgent = Depends(get_finance_agent),
) -> ChatResponse:
    """
    Send one message to the financial assistant.

    The assistant may record transactions, budgets or goals on the user's
    behalf before answering. Upstream model failures surface as 502.
    """
    logger.info("Chat message received", user_id=user_id, length=len(request.message))

    result = await agent.send_message(user_id, request.message)
    return ChatResponse(message=result["message"])


@router.get("/history", response_model=ChatHistoryResponse)
async def get_history(
    limit: int = Query(100, ge=1, le=500, description="Most recent messages to return"),
    user_id: str = Depends(get_current_user_id),
    message_repo: MessageRepository = Depends(get_message_repository),
) -> ChatHistoryResponse:
    """Persisted conversation log, tool results included, oldest first."""
    messages = await message_repo.get_history(user_id, limit=limit)
    total = await message_repo.count_by_user(user_id)

    logger.info("Chat history retrieved", user_id=user_id, count=len(messages))

    return ChatHistoryResponse(messages=messages, total=total)
