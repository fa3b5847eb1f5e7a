"""
Financial assistant module.

A bounded tool-calling loop over an OpenRouter chat-completion model.
Conversation history lives in MongoDB; tools act on the user's
transactions, budgets and goals.
"""

from .finance_agent import FALLBACK_MESSAGE, FinanceAgent
from .llm_client import AssistantMessage, OpenRouterClient
from .state import AgentState, Turn

__all__ = [
    "FALLBACK_MESSAGE",
    "AgentState",
    "AssistantMessage",
    "FinanceAgent",
    "OpenRouterClient",
    "Turn",
]
