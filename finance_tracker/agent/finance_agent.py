"""
Financial assistant turn orchestration.

One send_message call is one turn: load context, persist the user message,
then drive the turn state machine one step at a time until it reaches DONE
or EXHAUSTED. Every model reply and tool result is persisted as it happens,
so an aborted turn leaves a faithful partial log.
"""

import json
from typing import Any

import structlog

from ..core.clock import Clock, SystemClock
from ..core.config import Settings
from ..database.repositories.message_repository import MessageRepository
from .llm_client import AssistantMessage, OpenRouterClient, ToolCall
from .prompts import build_system_message
from .state import AgentState, Turn
from .tools.registry import ToolRegistry

logger = structlog.get_logger()

FALLBACK_MESSAGE = (
    "I'm having trouble formulating a response right now, "
    "but your data and tools are available."
)


class FinanceAgent:
    """Bounded model/tool loop for the financial assistant."""

    def __init__(
        self,
        message_repo: MessageRepository,
        registry: ToolRegistry,
        llm_client: OpenRouterClient,
        settings: Settings,
        clock: Clock | None = None,
    ):
        """
        Initialize agent.

        Args:
            message_repo: Conversation store
            registry: Immutable tool catalog
            llm_client: Chat-completion client
            settings: Iteration bound and context size
            clock: Time source for the system prompt
        """
        self.message_repo = message_repo
        self.registry = registry
        self.llm_client = llm_client
        self.clock = clock or SystemClock()
        self.max_iterations = settings.agent_max_iterations
        self.context_limit = settings.agent_context_limit

    async def start_turn(self, user_id: str, text: str) -> Turn:
        """
        Build the message list and persist the user message.

        The user message is stored before any model call so it survives an
        upstream failure.
        """
        history = await self.message_repo.load_context(user_id, limit=self.context_limit)
        messages: list[dict[str, Any]] = [build_system_message(self.clock), *history]

        turn = Turn(user_id=user_id, messages=messages, max_iterations=self.max_iterations)

        message_id = await self.message_repo.append(user_id, "user", text)
        turn.persisted_message_ids.append(message_id)
        turn.messages.append({"role": "user", "content": text})

        logger.info(
            "Turn started",
            user_id=user_id,
            context_messages=len(history),
            max_iterations=self.max_iterations,
        )
        return turn

    async def step(self, turn: Turn) -> AgentState:
        """
        Advance a turn by one transition.

        Returns:
            The state after the transition

        Raises:
            UpstreamError: The model call failed; the turn is aborted
        """
        if turn.state == AgentState.AWAITING_MODEL:
            await self._call_model(turn)
        elif turn.state == AgentState.DISPATCHING:
            await self._dispatch_tools(turn)
        return turn.state

    async def send_message(self, user_id: str, text: str) -> dict[str, str]:
        """
        Run one full turn for a user message.

        Args:
            user_id: Conversation owner
            text: Free-text user message

        Returns:
            {"message": final answer or fallback text}

        Raises:
            UpstreamError: Propagated from the LLM client
        """
        turn = await self.start_turn(user_id, text)

        while not turn.state.is_terminal:
            await self.step(turn)

        if turn.state == AgentState.EXHAUSTED or not turn.final_message:
            logger.warning(
                "Turn ended without an answer",
                user_id=user_id,
                state=turn.state.value,
                model_calls=turn.model_calls,
            )
            return {"message": FALLBACK_MESSAGE}

        logger.info("Turn completed", user_id=user_id, model_calls=turn.model_calls)
        return {"message": turn.final_message}

    async def _call_model(self, turn: Turn) -> None:
        if turn.iterations_left <= 0:
            turn.state = AgentState.EXHAUSTED
            return

        turn.model_calls += 1
        reply = await self.llm_client.chat_completion(
            turn.messages, self.registry.definitions()
        )

        if reply is None:
            turn.state = AgentState.EXHAUSTED
            return

        content = reply.content or ""
        message_id = await self.message_repo.append(turn.user_id, "assistant", content)
        turn.persisted_message_ids.append(message_id)
        turn.messages.append(reply.to_request_message())

        if reply.has_tool_calls:
            turn.pending_reply = reply
            turn.state = AgentState.DISPATCHING
        else:
            turn.final_message = content
            turn.state = AgentState.DONE

    async def _dispatch_tools(self, turn: Turn) -> None:
        reply: AssistantMessage | None = turn.pending_reply
        turn.pending_reply = None

        # Sequential on purpose: a later call may depend on an earlier one
        for call in reply.tool_calls if reply else []:
            await self._run_tool_call(turn, call)

        turn.state = AgentState.AWAITING_MODEL

    async def _run_tool_call(self, turn: Turn, call: ToolCall) -> None:
        name = call.function.name
        result = await self.registry.dispatch(turn.user_id, name, call.function.arguments)
        content = json.dumps(result, default=str)

        message_id = await self.message_repo.append(
            turn.user_id, "tool", content, tool_name=name
        )
        turn.persisted_message_ids.append(message_id)
        turn.messages.append(
            {
                "role": "tool",
                "tool_call_id": call.id,
                "name": name,
                "content": content,
            }
        )

        logger.info(
            "Tool result recorded",
            user_id=turn.user_id,
            tool_name=name,
            tool_call_id=call.id,
            is_error="error" in result,
        )
