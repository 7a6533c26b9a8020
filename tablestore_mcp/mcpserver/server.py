"""
MCP server entrypoint that exposes the record store tools and schema resources.

Usage:
    python -m tablestore_mcp.mcpserver.server [--mode stdio|sse|ws]

The stdio mode is what desktop MCP clients launch. The ``sse`` and ``ws``
modes serve the same protocol over HTTP (FastAPI + uvicorn) for remote
connectors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, Iterable, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents

from .. import __version__
from ..config_loader import Settings, load_settings
from ..errors import ConfigurationError
from ..store.client import RecordStoreClient
from . import resources
from .sessions import SessionStore
from .tools import TOOLSETS, ToolRegistry, build_registry

logger = logging.getLogger(__name__)

SERVER_NAME = "tablestore-mcp"


def to_call_tool_result(envelope: Dict[str, Any]) -> types.CallToolResult:
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=item["text"]) for item in envelope["content"]
        ],
        isError=envelope["isError"],
    )


class TableStoreMCPServer:
    """Wires the tool registry and schema resources onto a low-level MCP server."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[RecordStoreClient] = None,
        registry: Optional[ToolRegistry] = None,
    ) -> None:
        self.settings = settings
        self.client = client or RecordStoreClient(
            settings.api_key, settings.api_url, timeout=settings.http_timeout
        )
        self.registry = registry or build_registry(settings, self.client)
        self.app = Server(SERVER_NAME, version=__version__)
        self._register_handlers()

    def _register_handlers(self) -> None:
        app = self.app

        @app.list_tools()
        async def _list_tools() -> List[types.Tool]:
            return [
                types.Tool(
                    name=descriptor["name"],
                    description=descriptor["description"],
                    inputSchema=descriptor["inputSchema"],
                )
                for descriptor in self.registry.list_tools()
            ]

        # Arguments are validated by the registry so failures come back as envelopes.
        @app.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
            envelope = await self.registry.call_tool(name, arguments)
            return to_call_tool_result(envelope)

        @app.list_resources()
        async def _list_resources() -> List[types.Resource]:
            return [
                types.Resource(uri=item["uri"], name=item["name"], mimeType=item["mimeType"])
                for item in await resources.list_resources(self.client)
            ]

        @app.read_resource()
        async def _read_resource(uri: Any) -> Iterable[ReadResourceContents]:
            text = await resources.read_resource(self.client, str(uri))
            return [ReadResourceContents(content=text, mime_type=resources.MIME_TYPE)]

    def health(self, sessions: SessionStore) -> Dict[str, Any]:
        return {
            "status": "ok",
            "name": SERVER_NAME,
            "version": __version__,
            "toolset": self.registry.name,
            "tools": self.registry.names,
            "activeSessions": len(sessions),
        }

    # ---------------------------
    # stdio mode
    # ---------------------------
    async def run_stdio(self) -> None:
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            await self.app.run(
                read_stream, write_stream, self.app.create_initialization_options()
            )

    # ---------------------------
    # HTTP modes (SSE and WebSocket)
    # ---------------------------
    def create_http_app(self, sessions: Optional[SessionStore] = None):
        """Build a FastAPI app serving ``/sse``, ``/messages/``, ``/ws`` and ``/healthz``."""

        try:
            from fastapi import FastAPI, Request
            from mcp.server.sse import SseServerTransport
            from starlette.responses import Response
            from starlette.routing import WebSocketRoute
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "HTTP mode requires fastapi (pip install fastapi uvicorn)"
            ) from exc

        store = sessions if sessions is not None else SessionStore()
        sse = SseServerTransport("/messages/")
        http_app = FastAPI(title=SERVER_NAME, version=__version__)
        http_app.state.sessions = store

        async def handle_sse(request: Request) -> Response:
            session = store.open("sse")
            try:
                async with sse.connect_sse(
                    request.scope, request.receive, request._send
                ) as (read_stream, write_stream):
                    await self.app.run(
                        read_stream, write_stream, self.app.create_initialization_options()
                    )
            finally:
                store.close(session.session_id)
            return Response()

        http_app.add_route("/sse", handle_sse, methods=["GET"])
        http_app.mount("/messages/", app=sse.handle_post_message)
        http_app.router.routes.append(WebSocketRoute("/ws", endpoint=_WebSocketEndpoint(self, store)))

        @http_app.get("/healthz")
        async def healthz() -> Dict[str, Any]:
            return self.health(store)

        return http_app

    async def serve_http(self, host: str, port: int) -> None:
        try:
            import uvicorn
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("HTTP mode requires uvicorn.") from exc

        logger.info("Starting %s (%s toolset) on http://%s:%s", SERVER_NAME, self.registry.name, host, port)
        config = uvicorn.Config(
            self.create_http_app(), host=host, port=port, log_level="info", ws="websockets"
        )
        await uvicorn.Server(config).serve()


class _WebSocketEndpoint:
    """Raw ASGI endpoint carrying MCP over a WebSocket connection."""

    def __init__(self, server: TableStoreMCPServer, sessions: SessionStore) -> None:
        self.server = server
        self.sessions = sessions

    async def __call__(self, scope, receive, send) -> None:
        from mcp.server.websocket import websocket_server

        if scope["type"] != "websocket":  # pragma: no cover
            return
        session = self.sessions.open("ws")
        try:
            async with websocket_server(scope, receive, send) as (read_stream, write_stream):
                app = self.server.app
                await app.run(read_stream, write_stream, app.create_initialization_options())
        finally:
            self.sessions.close(session.session_id)


async def _self_test(server: TableStoreMCPServer) -> None:
    """Quick check of credentials and tool wiring without a MCP client."""

    listing = await server.client.list_bases()
    print(f"[self-test] toolset: {server.registry.name} ({len(server.registry.names)} tools)")
    print(f"[self-test] bases: {len(listing.bases)}")
    if listing.bases:
        first = listing.bases[0]
        print(f"[self-test] first base: {first.id} {first.name}")
        schema = await server.client.get_base_schema(first.id)
        print(f"[self-test] tables in first base: {len(schema.tables)}")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for ``python -m`` usage and the ``tablestore-mcp`` script."""

    parser = argparse.ArgumentParser(
        description="Run the tablestore MCP server (stdio, SSE or WebSocket).",
    )
    parser.add_argument(
        "--mode",
        choices=["auto", "stdio", "sse", "ws"],
        default="auto",
        help="Server mode: stdio (MCP clients), sse/ws (HTTP), or auto (stdio unless stdin is a TTY).",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host for HTTP modes.")
    parser.add_argument("--port", type=int, default=8765, help="Port for HTTP modes.")
    parser.add_argument(
        "--toolset",
        choices=list(TOOLSETS),
        default=None,
        help="Tool profile to expose (overrides TABLESTORE_MCP_TOOLSET).",
    )
    parser.add_argument("--config", default=None, help="Optional JSON configuration file.")
    parser.add_argument(
        "--log-level",
        default=os.getenv("TABLESTORE_MCP_LOG_LEVEL", "INFO"),
        help="Logging level (logs go to stderr).",
    )
    parser.add_argument(
        "--self-test",
        action="store_true",
        help="List bases with the configured credentials instead of starting a server.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = load_settings({"toolset": args.toolset}, config_path=args.config)
        server = TableStoreMCPServer(settings)
    except ConfigurationError as exc:
        parser.exit(2, f"error: {exc}\n")

    if args.self_test:
        asyncio.run(_self_test(server))
        return

    if args.mode in {"sse", "ws"}:
        asyncio.run(server.serve_http(args.host, args.port))
        return

    if args.mode == "auto" and sys.stdin.isatty():
        # Prevent confusing JSON parse errors when no MCP client is attached.
        print("stdin is a TTY; running self-test. Pass --mode stdio to run the MCP server.")
        asyncio.run(_self_test(server))
        return

    asyncio.run(server.run_stdio())


if __name__ == "__main__":  # pragma: no cover - CLI helper
    main(sys.argv[1:])
