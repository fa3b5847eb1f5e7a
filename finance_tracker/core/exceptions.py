"""
Error types for the finance tracker and their HTTP status codes.

- 4xx: the caller sent something unusable (bad body, bad token)
- 5xx: MongoDB or configuration trouble on our side
- 502/503: the LLM provider or another dependency failed

Tool-level errors (ToolExecutionError, UnknownToolError) never reach the HTTP
layer: the tool dispatcher converts them into ``{"error": ...}`` payloads that
are fed back to the model.

Usage:
    from finance_tracker.core.exceptions import UpstreamError

    raise UpstreamError("OpenRouter returned 429", upstream_status=429, body="...")
"""

from typing import Any


class AppError(Exception):
    """
    Root of all service errors.

    Carries a message plus arbitrary context kwargs that end up in the log
    event and in to_dict().
    """

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Flatten type, message, status and context into one dict."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            **self.context,
        }


# ===== Caller Errors =====


class ValidationError(AppError):
    """User provided invalid input (e.g., a message without a role)."""

    status_code = 400
    error_type = "validation_error"


# ===== Internal Errors =====


class DatabaseError(AppError):
    """MongoDB connection or query failure."""

    status_code = 500
    error_type = "database_error"


class ConfigurationError(AppError):
    """Bad or missing settings, normally raised during startup."""

    status_code = 500
    error_type = "configuration_error"


# ===== Tool Errors (converted to tool results, never surfaced over HTTP) =====


class ToolExecutionError(AppError):
    """A tool handler could not complete (bad currency, missing category, etc.)."""

    status_code = 500
    error_type = "tool_execution_error"

    def __init__(self, message: str, tool_name: str | None = None, **context: Any):
        super().__init__(message, tool_name=tool_name, **context)


class UnknownToolError(ToolExecutionError):
    """The model requested a tool that is not in the registry."""

    error_type = "unknown_tool_error"

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool {tool_name}", tool_name=tool_name)


# ===== Dependency Errors =====


class ExternalServiceError(AppError):
    """A third-party dependency is unavailable."""

    status_code = 503
    error_type = "external_service_error"

    def __init__(self, message: str, service: str, **context: Any):
        super().__init__(message, service=service, **context)


class UpstreamError(ExternalServiceError):
    """
    The LLM chat-completion service failed.

    Raised for non-2xx responses (status code and body attached) and for
    transport failures (no status code). Aborts the current turn.
    """

    status_code = 502
    error_type = "upstream_error"

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        body: str = "",
        service: str = "openrouter",
        **context: Any,
    ):
        super().__init__(
            message,
            service=service,
            upstream_status=upstream_status,
            body=body,
            **context,
        )
        self.upstream_status = upstream_status
        self.body = body
