"""
Shared machinery for MCP tools: tool specs, the registry and the result envelope.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from ...config_loader import Settings
from ...errors import NotFoundError, ToolValidationError
from ...store.client import RecordStoreClient

logger = logging.getLogger(__name__)


class ToolArgs(BaseModel):
    """Base class for tool argument models; unknown keys are rejected."""

    model_config = {"extra": "forbid"}


@dataclass
class ToolContext:
    """What a handler may touch: the backend client and read-only settings."""

    client: RecordStoreClient
    settings: Settings


Handler = Callable[[ToolContext, Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: Type[ToolArgs]
    handler: Handler

    def input_schema(self) -> Dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema["type"] = "object"
        schema.setdefault("properties", {})
        schema["additionalProperties"] = False
        return schema

    def descriptor(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", "replace")
    return str(value)


def to_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=_json_default)


def format_tool_response(data: Any, is_error: bool = False) -> Dict[str, Any]:
    """Wrap *data* in the text-only envelope every tool call returns."""

    return {
        "content": [{"type": "text", "text": to_json(data)}],
        "isError": is_error,
    }


def format_validation_error(exc: ValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg')}")
    return "Invalid arguments: " + "; ".join(parts)


class ToolRegistry:
    """Closed mapping of tool name to :class:`ToolSpec` plus the dispatcher."""

    def __init__(self, name: str, specs: Iterable[ToolSpec], context: ToolContext) -> None:
        self.name = name
        self.context = context
        self._specs: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            self._specs[spec.name] = spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    @property
    def names(self) -> List[str]:
        return list(self._specs)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [spec.descriptor() for spec in self._specs.values()]

    def validate(self, name: str, arguments: Optional[Mapping[str, Any]]) -> tuple[ToolSpec, ToolArgs]:
        spec = self._specs.get(name)
        if spec is None:
            raise NotFoundError(f"Unknown tool: {name}")
        if arguments is not None and not isinstance(arguments, Mapping):
            raise ToolValidationError("Invalid arguments: expected an object")
        try:
            args = spec.args_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            raise ToolValidationError(format_validation_error(exc)) from exc
        return spec, args

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Validate, dispatch and envelope a tool call. Never raises."""

        keys = sorted(arguments) if isinstance(arguments, Mapping) else []
        logger.info("Tool %s called with keys %s", name, keys)
        try:
            spec, args = self.validate(name, arguments)
            result = await spec.handler(self.context, args)
        except Exception as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return format_tool_response(f"Error in tool {name}: {exc}", is_error=True)
        return format_tool_response(result)


__all__ = [
    "Handler",
    "ToolArgs",
    "ToolContext",
    "ToolRegistry",
    "ToolSpec",
    "format_tool_response",
    "format_validation_error",
    "to_json",
]
