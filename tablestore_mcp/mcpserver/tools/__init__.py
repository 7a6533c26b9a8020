"""MCP tools package: builds the registry for the configured toolset."""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Dict, Optional

from ...config_loader import Settings
from ...errors import ConfigurationError
from ...store.client import RecordStoreClient
from .base import ToolContext, ToolRegistry, ToolSpec, format_tool_response

_TOOLSET_MODULES: Dict[str, str] = {
    "minimal": "tablestore_mcp.mcpserver.tools.minimal",
    "full": "tablestore_mcp.mcpserver.tools.full",
}
TOOLSETS = tuple(_TOOLSET_MODULES)


def load_toolset(name: str) -> ModuleType:
    """Import the toolset module registered under *name*."""

    module_path = _TOOLSET_MODULES.get(name)
    if module_path is None:
        raise ConfigurationError(
            f"Unknown toolset '{name}'. Expected one of: {', '.join(TOOLSETS)}"
        )
    return import_module(module_path)


def build_registry(
    settings: Settings,
    client: Optional[RecordStoreClient] = None,
) -> ToolRegistry:
    if client is None:
        client = RecordStoreClient(
            settings.api_key, settings.api_url, timeout=settings.http_timeout
        )
    module = load_toolset(settings.toolset)
    return ToolRegistry(settings.toolset, module.TOOLS, ToolContext(client=client, settings=settings))


__all__ = [
    "TOOLSETS",
    "ToolContext",
    "ToolRegistry",
    "ToolSpec",
    "build_registry",
    "format_tool_response",
    "load_toolset",
]
