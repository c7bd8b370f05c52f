#!/usr/bin/env python3

import asyncio
import os
import sys
import tempfile
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Dict, Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from config import TODOS_FILE_PATH_ENV

SERVER_SCRIPT = Path(__file__).with_name("todoodles_server.py")


def result_text(result) -> str:
    """Join the text blocks of a tool result"""
    text = "\n".join(block.text for block in result.content if getattr(block, "type", None) == "text")
    if getattr(result, "isError", False):
        return f"❌ Tool Error: {text}"
    return text


class SimpleMCPClient:
    """Simple client that launches the todoodles server over stdio"""

    def __init__(self, todos_file_path: str):
        self.server_params = StdioServerParameters(
            command=sys.executable,
            args=[str(SERVER_SCRIPT)],
            env={**os.environ, TODOS_FILE_PATH_ENV: todos_file_path},
        )
        self.exit_stack = AsyncExitStack()
        self.session = None

    async def connect(self):
        """Start the server process and initialize the session"""
        read_stream, write_stream = await self.exit_stack.enter_async_context(stdio_client(self.server_params))
        self.session = await self.exit_stack.enter_async_context(ClientSession(read_stream, write_stream))
        await self.session.initialize()

    async def list_tools(self):
        """List available tools"""
        response = await self.session.list_tools()
        return response.tools

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Call a specific tool with arguments"""
        result = await self.session.call_tool(tool_name, arguments)
        return result_text(result)

    async def close(self):
        """Stop the server process"""
        await self.exit_stack.aclose()


async def main():
    """Example usage of the todoodles server"""
    with tempfile.TemporaryDirectory() as data_dir:
        client = SimpleMCPClient(os.path.join(data_dir, "todoodles.json"))

        try:
            await client.connect()
            print("=== Todoodles MCP Demo ===\n")

            print("1. Available tools:")
            for tool in await client.list_tools():
                print(f"   - {tool.name}: {tool.description}")
            print()

            print("2. Adding todoodles:")
            print(f"   {await client.call_tool('add_todoodle', {'text': 'Write report'})}")
            print(f"   {await client.call_tool('add_todoodle', {'text': 'Buy milk'})}")
            print()

            print("3. Completing todoodle with ID 1:")
            print(f"   {await client.call_tool('complete_todoodle', {'id': '1'})}")
            print()

            print("4. Listing all todoodles:")
            print(f"   {await client.call_tool('get_all_todoodles', {})}")
            print()

            print("5. Searching for 'milk':")
            print(f"   {await client.call_tool('search_todoodles', {'query': 'milk'})}")

        except Exception as e:
            print(f"Error: {e}")

        finally:
            await client.close()


if __name__ == "__main__":
    asyncio.run(main())
