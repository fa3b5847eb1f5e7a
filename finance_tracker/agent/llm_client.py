"""
OpenRouter chat-completion client with function calling.

One POST per call, no retries and (by default) no client-side timeout: a
stalled upstream call stalls the turn, so callers impose their own deadline.
Non-2xx responses, transport failures and unparseable bodies become
UpstreamError; a response without choices is a normal empty outcome and
returns None.
"""

import json
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.config import Settings
from ..core.exceptions import UpstreamError

logger = structlog.get_logger()

# Bodies are truncated before being attached to errors and logs
MAX_ERROR_BODY_CHARS = 2000


class ToolCallFunction(BaseModel):
    """Function name and JSON-encoded arguments chosen by the model."""

    name: str
    arguments: str = "{}"

    @field_validator("arguments", mode="before")
    @classmethod
    def _default_arguments(cls, value: Any) -> Any:
        # Some providers send arguments as an object instead of a JSON string
        if isinstance(value, dict):
            return json.dumps(value)
        return value if isinstance(value, str) else "{}"


class ToolCall(BaseModel):
    """One tool invocation requested by the model."""

    id: str
    type: str = "function"
    function: ToolCallFunction


class AssistantMessage(BaseModel):
    """The assistant message of the first response choice."""

    role: str = "assistant"
    content: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)

    @field_validator("tool_calls", mode="before")
    @classmethod
    def _null_tool_calls(cls, value: Any) -> Any:
        # Providers send null when the model answers in plain text
        return value or []

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_request_message(self) -> dict[str, Any]:
        """Shape to append to the next request's message list."""
        message: dict[str, Any] = {"role": "assistant", "content": self.content or ""}
        if self.tool_calls:
            message["tool_calls"] = [call.model_dump() for call in self.tool_calls]
        return message


class OpenRouterClient:
    """
    Async client for an OpenAI-compatible chat-completions endpoint.

    Holds one pooled httpx.AsyncClient for the life of the process.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize client.

        Args:
            settings: Application settings with API key, URL and model
            client: Optional pre-built HTTP client (tests, shared pools)
        """
        self.settings = settings
        self.url = settings.openrouter_url
        self.model = settings.openrouter_model
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.llm_timeout_seconds),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

        if not settings.openrouter_api_key:
            logger.warning("OpenRouter API key not configured")

        logger.info(
            "OpenRouter client initialized",
            model=self.model,
            api_key_configured=bool(settings.openrouter_api_key),
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "HTTP-Referer": self.settings.openrouter_referer,
            "X-Title": self.settings.openrouter_app_title,
        }

    async def chat_completion(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> AssistantMessage | None:
        """
        Request one chat completion with the tool catalog attached.

        Args:
            messages: Full message list (system, history, user, tool results)
            tools: OpenAI-style function definitions

        Returns:
            Assistant message of the first choice, or None if there is none

        Raises:
            UpstreamError: Non-2xx status, network failure or unparseable body
        """
        body = {
            "model": self.model,
            "messages": messages,
            "tools": tools,
            "tool_choice": "auto",
        }

        logger.info(
            "Requesting chat completion",
            model=self.model,
            message_count=len(messages),
            tool_count=len(tools),
        )

        try:
            response = await self.client.post(self.url, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(
                "Chat completion request failed",
                error=str(e),
                error_type=type(e).__name__,
                model=self.model,
            )
            raise UpstreamError(
                f"OpenRouter request failed: {type(e).__name__}: {e}",
                model=self.model,
            ) from e

        if not response.is_success:
            text = response.text[:MAX_ERROR_BODY_CHARS]
            logger.error(
                "Chat completion returned error status",
                status_code=response.status_code,
                body=text,
                model=self.model,
            )
            raise UpstreamError(
                f"OpenRouter error: {response.status_code} {text}",
                upstream_status=response.status_code,
                body=text,
                model=self.model,
            )

        try:
            payload = response.json()
            choices = payload.get("choices") or []
            if not choices:
                logger.warning("Chat completion returned no choices", model=self.model)
                return None
            message = AssistantMessage.model_validate(choices[0].get("message") or {})
        except (ValueError, AttributeError, ValidationError) as e:
            text = response.text[:MAX_ERROR_BODY_CHARS]
            logger.error(
                "Chat completion returned malformed body",
                status_code=response.status_code,
                error=str(e),
                body=text,
                model=self.model,
            )
            raise UpstreamError(
                f"OpenRouter returned malformed response: {type(e).__name__}",
                upstream_status=response.status_code,
                body=text,
                model=self.model,
            ) from e

        logger.info(
            "Chat completion received",
            model=self.model,
            tool_call_count=len(message.tool_calls),
            has_content=bool(message.content),
        )

        return message

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()
            logger.info("OpenRouter client closed")
