#!/usr/bin/env python3
"""
Todoodles MCP Server
Exposes a personal todo list, saved to a JSON file, over the MCP stdio protocol
"""

import asyncio
import logging
import math
import sys
from datetime import datetime
from typing import Any, Dict, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from config import ConfigurationError, get_todos_file_path, setup_logging
from todoodle_storage import TodoItem, TodoodleStore

logger = logging.getLogger(__name__)

SERVER_NAME = "todoodle-server"

TOOLS = [
    Tool(
        name="add_todoodle",
        description="Add a new todoodle item to the list",
        inputSchema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The text of the todoodle item"}
            },
            "required": ["text"]
        }
    ),
    Tool(
        name="get_today_todoodles",
        description="Get all todoodle items created today, ordered from newest to oldest",
        inputSchema={"type": "object", "properties": {}}
    ),
    Tool(
        name="get_all_todoodles",
        description="Get all todoodle items, ordered from newest to oldest",
        inputSchema={"type": "object", "properties": {}}
    ),
    Tool(
        name="complete_todoodle",
        description="Mark a todoodle item as completed",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The ID of the todoodle item to complete"}
            },
            "required": ["id"]
        }
    ),
    Tool(
        name="get_incomplete_todoodles",
        description="Get all incomplete todoodle items, ordered from newest to oldest",
        inputSchema={"type": "object", "properties": {}}
    ),
    Tool(
        name="search_todoodles",
        description="Search for todoodles by text content",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query to match against todoodle text"}
            },
            "required": ["query"]
        }
    ),
    Tool(
        name="complete_todoodle_by_text",
        description="Mark a todoodle as completed by searching for its text content",
        inputSchema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The text content to search for and complete"}
            },
            "required": ["text"]
        }
    ),
    Tool(
        name="delete_todoodle",
        description="Delete a todoodle by its ID",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The ID of the todoodle to delete"}
            },
            "required": ["id"]
        }
    ),
    Tool(
        name="get_todoodle_storage_info",
        description="Get information about where todoodles are stored and storage statistics",
        inputSchema={"type": "object", "properties": {}}
    ),
]


def format_time(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def minutes_taken(todoodle: TodoItem) -> int:
    # Halves round up
    return math.floor(todoodle.time_to_complete / 60000 + 0.5)


def format_status_line(todoodle: TodoItem) -> str:
    if todoodle.completed:
        status = f"✅ Completed in {minutes_taken(todoodle)} minutes"
    else:
        status = "⏳ Pending"
    return f"- {todoodle.text} ({format_time(todoodle.created_at)}) - {status}"


def format_completed(todoodle: TodoItem) -> str:
    return (
        f"🎉 Completed todoodle: \"{todoodle.text}\" "
        f"(ID: {todoodle.id}, took {minutes_taken(todoodle)} minutes)"
    )


def text_reply(text: str) -> List[TextContent]:
    return [TextContent(type="text", text=text)]


def require_argument(name: str, arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Missing required string argument '{key}' for tool: {name}")
    return value


async def run_tool(store: TodoodleStore, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Run a todoodle tool and format its reply.

    Unknown tools, bad arguments and failed saves raise, so the MCP layer
    reports them as tool errors. A missing todoodle is a normal reply.
    """
    arguments = arguments or {}

    if name == "add_todoodle":
        todoodle = await store.add(require_argument(name, arguments, "text"))
        return text_reply(
            f"📝 Added todoodle: \"{todoodle.text}\" (created at {format_time(todoodle.created_at)})"
        )

    elif name == "get_today_todoodles":
        todoodles = store.list_today()
        if not todoodles:
            return text_reply("📅 No todoodles for today!")
        summary = "\n".join(format_status_line(todoodle) for todoodle in todoodles)
        return text_reply(f"📅 Today's todoodles:\n{summary}")

    elif name == "get_all_todoodles":
        todoodles = store.list()
        if not todoodles:
            return text_reply("📋 No todoodles found!")
        summary = "\n".join(format_status_line(todoodle) for todoodle in todoodles)
        return text_reply(f"📋 All todoodles:\n{summary}")

    elif name == "complete_todoodle":
        todoodle = await store.complete_by_id(require_argument(name, arguments, "id"))
        if not todoodle:
            return text_reply("❌ Todoodle not found or already completed")
        return text_reply(format_completed(todoodle))

    elif name == "get_incomplete_todoodles":
        todoodles = store.list_incomplete()
        if not todoodles:
            return text_reply("📝 No incomplete todoodles found!")
        summary = "\n".join(
            f"- {todoodle.text} (created at {format_time(todoodle.created_at)})" for todoodle in todoodles
        )
        return text_reply(f"📝 Incomplete todoodles:\n{summary}")

    elif name == "search_todoodles":
        matches = store.search(require_argument(name, arguments, "query"))
        if not matches:
            return text_reply("🔍 No matching todoodles found")
        results = "\n".join(
            f"- ID: {todoodle.id}, Text: \"{todoodle.text}\" "
            f"({'✅ Completed' if todoodle.completed else '⏳ Pending'})"
            for todoodle in matches
        )
        return text_reply(f"🔍 Found {len(matches)} matching todoodles:\n{results}")

    elif name == "complete_todoodle_by_text":
        todoodle = await store.complete_by_text(require_argument(name, arguments, "text"))
        if not todoodle:
            return text_reply("❌ No matching todoodle found to complete")
        return text_reply(format_completed(todoodle))

    elif name == "delete_todoodle":
        if not await store.delete_by_id(require_argument(name, arguments, "id")):
            return text_reply("❌ Todoodle not found")
        return text_reply("🗑️ Todoodle deleted successfully")

    elif name == "get_todoodle_storage_info":
        stats = store.get_stats()

        info = f"📁 **Storage Information:**\n"
        info += f"📍 Location: {stats['storage_location']}\n"
        info += f"📊 Total Todoodles: {stats['total_todoodles']}\n"
        info += f"✅ Completed: {stats['completed_todoodles']}\n"
        info += f"⏳ Pending: {stats['incomplete_todoodles']}\n"
        info += f"💾 File Size: {stats['file_size_bytes']} bytes"

        return text_reply(info)

    raise ValueError(f"Unknown tool: {name}")


def create_server(store: TodoodleStore) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        """List available todoodle tools"""
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        """Handle tool calls from the client"""
        logger.info(f"🔧 Calling tool: {name}")
        return await run_tool(store, name, arguments)

    return server


async def main():
    """Run the MCP server"""
    setup_logging()

    try:
        todos_file_path = get_todos_file_path()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    logger.info("🚀 Todoodles MCP Server starting...")
    logger.info(f"📝 Todos will be saved to: {todos_file_path}")

    store = TodoodleStore(todos_file_path)
    await store.initialize()
    server = create_server(store)

    async with stdio_server() as (read_stream, write_stream):
        logger.info("✅ Todoodles MCP Server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
