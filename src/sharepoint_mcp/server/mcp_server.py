"""SharePoint MCP server for stdio clients such as Claude Desktop.

Exposes the folder, document and search tools from
``sharepoint_mcp.server.tools``. Graph requests are blocking, so each tool
call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from sharepoint_mcp.config import AppConfig, load_config
from sharepoint_mcp.server.tools import TOOLS, ToolDispatcher

logger = logging.getLogger(__name__)


class SharePointMcpServer:
    """MCP server for SharePoint document libraries.

    Attributes:
        server: MCP Server instance.
        dispatcher: ToolDispatcher that runs the tools.
    """

    def __init__(self, config: AppConfig, dispatcher: ToolDispatcher | None = None) -> None:
        """Initialise the server and register the MCP handlers."""
        self.config = config
        self.server = Server(config.server_name)
        self.dispatcher = dispatcher or ToolDispatcher(config)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return list of available tools."""
            return self.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool calls."""
            return await self.call_tool(name, arguments)

    def list_tools(self) -> list[Tool]:
        return list(TOOLS)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
        """Run a tool and wrap its JSON result as text content.

        Failures are logged and re-raised; the MCP SDK turns them into a
        result with ``isError`` set.
        """
        try:
            text = await asyncio.to_thread(self.dispatcher.call_tool_json, name, arguments)
        except Exception:
            logger.exception("[call_tool] tool call failed; name:%s", name)
            raise
        return [TextContent(type="text", text=text)]

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def main() -> None:
    """Entry point for the SharePoint MCP server."""
    config = load_config()
    # stdout carries the protocol; logs go to stderr.
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("[main] starting MCP server; name:%s", config.server_name)
    asyncio.run(SharePointMcpServer(config).run())


if __name__ == "__main__":
    main()
