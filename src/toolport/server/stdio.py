"""
MCP server exposing the tool registry over stdio.

The ``mcp`` SDK owns the wire protocol: JSON-RPC framing, the initialize
handshake, ping, notifications and protocol errors. This module maps the
registry onto ``tools/list`` and the dispatcher onto ``tools/call``.
stdout carries protocol traffic only, so logging must go to stderr.
"""

import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from toolport import SERVER_NAME, __version__
from toolport.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """A tool returned a failure result.

    Raised from the call handler so the SDK answers with ``isError`` set and
    the failure text as the only content block.
    """


class ToolServer:
    """Serve a dispatcher as an MCP server.

    Tool failures are ordinary results with ``isError`` set; JSON-RPC errors
    are left to the SDK for protocol problems.
    """

    def __init__(
        self,
        dispatcher: ToolDispatcher,
        name: str = SERVER_NAME,
        version: str = __version__,
    ):
        self.dispatcher = dispatcher
        self.server: Server = Server(name, version=version)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        # The dispatcher validates and coerces arguments itself
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> list[Tool]:
        """Registry manifest as MCP tool descriptions, in registration order."""
        return [
            Tool(name=entry["name"], description=entry["description"], inputSchema=entry["inputSchema"])
            for entry in self.dispatcher.registry.manifest()
        ]

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> list[TextContent]:
        """
        Invoke a tool through the dispatcher.

        Raises:
            ToolCallFailed: The tool returned a failure result
        """
        logger.info(f"call_tool: {name}")
        result = await self.dispatcher.invoke(name, arguments)
        if result.is_error:
            raise ToolCallFailed(result.text)
        return [TextContent(type="text", text=block.text) for block in result.content]

    async def run(self) -> None:
        """Serve on stdin/stdout until the client disconnects."""
        logger.info(f"{self.server.name} {self.server.version} serving on stdio")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
        logger.info("Input closed, server stopping")
