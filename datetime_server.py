#!/usr/bin/env python3
"""
DateTime MCP Server
Today's date and the current working week, with fiscal year and quarter information
"""

import asyncio
import json
import logging
from typing import Any, Dict, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import BaseModel

from config import setup_logging
from datetime_facts import get_today, get_working_week

logger = logging.getLogger(__name__)

SERVER_NAME = "datetime-server"

TOOLS = [
    Tool(
        name="get_today",
        description="Get today's date with fiscal year and quarter information",
        inputSchema={"type": "object", "properties": {}, "required": []}
    ),
    Tool(
        name="get_working_week",
        description="Get the current working week (Monday-Friday) with fiscal year and quarter information",
        inputSchema={"type": "object", "properties": {}, "required": []}
    ),
]


def json_reply(model: BaseModel) -> List[TextContent]:
    text = json.dumps(model.model_dump(by_alias=True), indent=2)
    return [TextContent(type="text", text=text)]


async def run_tool(name: str, arguments: Dict[str, Any] = None) -> List[TextContent]:
    if name == "get_today":
        return json_reply(get_today())
    elif name == "get_working_week":
        return json_reply(get_working_week())
    raise ValueError(f"Unknown tool: {name}")


def create_server() -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        """List available date tools"""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        return await run_tool(name, arguments)

    return server


async def main():
    """Run the MCP server"""
    setup_logging()
    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        logger.info("✅ DateTime MCP Server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
