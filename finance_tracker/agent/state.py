"""
Turn state for the financial assistant.

A turn moves through:

    AWAITING_MODEL -> DISPATCHING -> AWAITING_MODEL -> ... -> DONE | EXHAUSTED

AWAITING_MODEL makes one model call. DISPATCHING runs the tool calls of the
last reply in order. DONE holds the model's final answer; EXHAUSTED means the
iteration bound was hit or the model returned nothing usable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .llm_client import AssistantMessage


class AgentState(str, Enum):
    """States of one assistant turn."""

    AWAITING_MODEL = "awaiting_model"
    DISPATCHING = "dispatching"
    DONE = "done"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in (AgentState.DONE, AgentState.EXHAUSTED)


@dataclass
class Turn:
    """Mutable state of one send_message call."""

    user_id: str
    messages: list[dict[str, Any]]
    max_iterations: int
    state: AgentState = AgentState.AWAITING_MODEL
    model_calls: int = 0
    pending_reply: AssistantMessage | None = None
    final_message: str | None = None
    persisted_message_ids: list[str] = field(default_factory=list)

    @property
    def iterations_left(self) -> int:
        return self.max_iterations - self.model_calls
