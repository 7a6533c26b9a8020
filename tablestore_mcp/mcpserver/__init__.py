"""MCP server layer: tool registry, schema resources and transports."""

from .server import TableStoreMCPServer  # noqa: F401
from .tools import build_registry  # noqa: F401

__all__ = [
    "TableStoreMCPServer",
    "build_registry",
]
