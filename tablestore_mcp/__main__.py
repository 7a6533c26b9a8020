"""Executable module: ``python -m tablestore_mcp`` starts the MCP server."""

from __future__ import annotations

from tablestore_mcp.mcpserver.server import main

if __name__ == "__main__":
    main()
