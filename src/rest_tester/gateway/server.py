"""rest-tester MCP server - built on the official SDK's low-level Server.

The low-level server is used so protocol rejections reach the host as typed
JSON-RPC errors instead of being folded into ``isError`` tool results.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .. import __version__
from ..logger import get_logger
from .auth import AuthMode, select_auth_mode
from .config import Settings
from .envelope import ResultEnvelope, TransportFailureEnvelope
from .errors import ProtocolError, UnknownToolError
from .http import RestClient
from .prompts import endpoint_description
from .tools.call_endpoint import ENDPOINT_TOOL_NAME, INPUT_SCHEMA, call_endpoint

SERVER_NAME = "rest-tester"

_log = get_logger("rest_tester.gateway.server")


def endpoint_tool(settings: Settings, auth: AuthMode) -> types.Tool:
    return types.Tool(
        name=ENDPOINT_TOOL_NAME,
        description=endpoint_description(settings.base_url, auth.describe()),
        inputSchema=INPUT_SCHEMA,
    )


@dataclass
class RestTester:
    """Lifespan context: settings, the active auth mode and the shared HTTP client."""

    settings: Settings
    auth: AuthMode
    client: RestClient

    def list_tools(self) -> list[types.Tool]:
        return [endpoint_tool(self.settings, self.auth)]

    async def call_tool(self, name: str, arguments: Any) -> ResultEnvelope:
        """Dispatch a tool call.

        Raises:
            UnknownToolError: If ``name`` is not the endpoint tool
            InvalidParamsError: If the arguments are malformed
        """
        if name != ENDPOINT_TOOL_NAME:
            raise UnknownToolError(name)
        return await call_endpoint(
            self.client,
            base_url=self.settings.base_url,
            auth=self.auth,
            arguments=arguments,
        )


def to_call_tool_result(envelope: ResultEnvelope) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=envelope.to_json())],
        isError=isinstance(envelope, TransportFailureEnvelope),
    )


def create_server(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Server[RestTester, Any]:
    """Create the rest-tester MCP server.

    The auth mode is resolved here, once, and shared read-only by every call.

    Args:
        settings: Process configuration
        transport: Optional httpx transport, mainly for tests

    Returns:
        Configured low-level MCP server ready to run
    """
    auth = select_auth_mode(settings)

    @asynccontextmanager
    async def lifespan(_server: Server[RestTester, Any]) -> AsyncIterator[RestTester]:
        client = RestClient.create(settings, transport=transport)
        _log.info(f"Serving {settings.base_url} (auth: {auth.name})")
        async with client:
            yield RestTester(settings=settings, auth=auth, client=client)

    server: Server[RestTester, Any] = Server(SERVER_NAME, version=__version__, lifespan=lifespan)

    def _get_tester() -> RestTester:
        return server.request_context.lifespan_context

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return _get_tester().list_tools()

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        try:
            envelope = await _get_tester().call_tool(req.params.name, req.params.arguments)
        except ProtocolError as exc:
            _log.info(f"Rejected call to {req.params.name!r}: {exc}", extra={"event": "tool_call_rejected"})
            raise exc.to_mcp_error() from exc
        return types.ServerResult(to_call_tool_result(envelope))

    # Registered directly: the call_tool() decorator turns every exception into an isError result.
    server.request_handlers[types.CallToolRequest] = call_tool

    return server


async def serve(settings: Settings) -> None:
    """Serve MCP over stdio until the host closes the stream."""
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        _log.info("REST API Tester MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
