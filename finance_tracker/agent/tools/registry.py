"""
Tool registry and dispatcher for the financial assistant.

The registry is built once at startup from a list of ToolSpec and never
changes afterwards. Each tool declares its arguments as a pydantic model;
the JSON schema shown to the model is generated from it and the same model
validates whatever arguments the model sends back.

dispatch() never raises. Every failure becomes an ``{"error": ...}`` payload
that is fed back to the model as the tool result:
- malformed or non-object argument JSON is treated as ``{}``
- unknown tool names return ``{"error": "Unknown tool <name>"}``
- argument validation failures return the offending fields
- exceptions raised by a handler return the exception message
"""

import copy
import json
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import pydantic
import structlog

from ...core.exceptions import AppError, UnknownToolError

logger = structlog.get_logger()

ToolHandler = Callable[[str, Any], Awaitable[dict[str, Any]]]


class NoArguments(pydantic.BaseModel):
    """Argument model for tools that take no parameters."""


@dataclass(frozen=True)
class ToolSpec:
    """A named tool: description, argument model and async handler."""

    name: str
    description: str
    args_model: type[pydantic.BaseModel]
    handler: ToolHandler

    def definition(self) -> dict[str, Any]:
        """OpenAI-style function definition exposed to the model."""
        parameters = self.args_model.model_json_schema()
        parameters.pop("title", None)
        parameters.setdefault("properties", {})
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


def parse_arguments(raw_arguments: str | dict[str, Any] | None) -> dict[str, Any]:
    """Decode model-supplied arguments, defaulting to an empty object."""
    if isinstance(raw_arguments, dict):
        return raw_arguments
    if not raw_arguments:
        return {}

    try:
        decoded = json.loads(raw_arguments)
    except (TypeError, ValueError):
        logger.warning("Malformed tool arguments, using empty object", raw=raw_arguments)
        return {}

    if not isinstance(decoded, dict):
        logger.warning("Tool arguments are not an object, using empty object", raw=raw_arguments)
        return {}
    return decoded


class ToolRegistry:
    """Immutable catalog of tools keyed by name."""

    def __init__(self, tools: Iterable[ToolSpec]):
        catalog: dict[str, ToolSpec] = {}
        for spec in tools:
            if spec.name in catalog:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            catalog[spec.name] = spec

        self._tools = MappingProxyType(catalog)
        self._definitions = tuple(spec.definition() for spec in catalog.values())

        logger.info("Tool registry built", tool_count=len(catalog), tools=list(catalog))

    @property
    def tools(self) -> MappingProxyType:
        return self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[dict[str, Any]]:
        """Function definitions for every tool, in catalog order."""
        return copy.deepcopy(list(self._definitions))

    async def dispatch(
        self,
        user_id: str,
        name: str,
        raw_arguments: str | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Validate arguments and run one tool for a user.

        Args:
            user_id: User the tool acts on behalf of
            name: Tool name chosen by the model
            raw_arguments: JSON string (or already-decoded dict) from the model

        Returns:
            Handler result, or an ``{"error": ...}`` payload on any failure
        """
        spec = self._tools.get(name)
        if spec is None:
            error = UnknownToolError(name)
            logger.warning("Unknown tool requested", tool_name=name, user_id=user_id)
            return {"error": error.message}

        arguments = parse_arguments(raw_arguments)

        try:
            args = spec.args_model.model_validate(arguments)
        except pydantic.ValidationError as e:
            details = [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            logger.warning(
                "Tool arguments failed validation",
                tool_name=name,
                user_id=user_id,
                details=details,
            )
            return {"error": f"Invalid arguments for {name}", "details": details}

        start_time = time.time()
        try:
            result = await spec.handler(user_id, args)
        except AppError as e:
            logger.warning(
                "Tool execution failed",
                tool_name=name,
                user_id=user_id,
                error=e.message,
                error_type=e.error_type,
            )
            return {"error": e.message}
        except Exception as e:
            logger.error(
                "Tool execution raised unexpected error",
                tool_name=name,
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return {"error": str(e) or type(e).__name__}

        logger.info(
            "Tool executed",
            tool_name=name,
            user_id=user_id,
            elapsed_ms=round((time.time() - start_time) * 1000, 1),
        )

        return result
