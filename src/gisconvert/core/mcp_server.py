import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import ErrorData, TextContent, Tool

from gisconvert.core.context import ServerContext
from gisconvert.core.errors import GisConversionError
from gisconvert.core.services.conversion_service import ConversionService

logger = logging.getLogger(__name__)


class GisFormatMCPServer:
    """MCP front end for the conversion tools of one ServerContext."""

    def __init__(self, context: ServerContext):
        self.context = context
        self.service = ConversionService(context)
        self.server = Server(context.settings.SERVER_NAME, version=context.settings.SERVER_VERSION)

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            return await self.list_tools()

        # An McpError raised by this handler is sent as a JSON-RPC error with its code.
        async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
            content = await self.call_tool(req.params.name, req.params.arguments)
            return types.ServerResult(types.CallToolResult(content=content, isError=False))

        self.server.request_handlers[types.CallToolRequest] = handle_call_tool

    async def list_tools(self) -> List[Tool]:
        logger.debug("MCP: list_tools called")
        return [
            Tool(
                name=spec.slug,
                description=spec.description,
                inputSchema=spec.parameters or {"type": "object", "properties": {}},
            )
            for spec in self.service.list_tools()
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Run a tool; failures are raised as McpError carrying the normalized code."""
        try:
            text = await self.service.execute(name, arguments)
        except GisConversionError as e:
            raise McpError(ErrorData(code=e.code, message=e.message)) from e
        return [TextContent(type="text", text=text)]

    async def run(self):
        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("GIS Format Conversion MCP server running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.context.close()
