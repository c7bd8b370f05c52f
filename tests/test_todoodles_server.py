import asyncio

import pytest
from mcp.shared.memory import create_connected_server_and_client_session
from mcp.types import CallToolRequest, ListToolsRequest

from todoodle_storage import PersistenceError
from todoodles_server import TOOLS, create_server, format_time, run_tool


def call(store, name, arguments=None) -> str:
    content = asyncio.run(run_tool(store, name, arguments or {}))
    assert len(content) == 1
    assert content[0].type == "text"
    return content[0].text


def test_add_todoodle(store):
    text = call(store, "add_todoodle", {"text": "Write report"})

    created_at = format_time(store.todoodles[0].created_at)
    assert text == f"📝 Added todoodle: \"Write report\" (created at {created_at})"


def test_empty_list_messages(store):
    assert call(store, "get_today_todoodles") == "📅 No todoodles for today!"
    assert call(store, "get_all_todoodles") == "📋 No todoodles found!"
    assert call(store, "get_incomplete_todoodles") == "📝 No incomplete todoodles found!"
    assert call(store, "search_todoodles", {"query": "milk"}) == "🔍 No matching todoodles found"


def test_complete_todoodle_reports_minutes(store, clock):
    call(store, "add_todoodle", {"text": "Write report"})
    clock.advance(minutes=2)

    text = call(store, "complete_todoodle", {"id": "1"})

    assert text == "🎉 Completed todoodle: \"Write report\" (ID: 1, took 2 minutes)"
    assert call(store, "complete_todoodle", {"id": "1"}) == "❌ Todoodle not found or already completed"


@pytest.mark.parametrize("seconds, minutes", [
    (29, 0),
    (30, 1),
    (90, 2),
    (150, 3),
])
def test_completion_minutes_round_halves_up(store, clock, seconds, minutes):
    call(store, "add_todoodle", {"text": "Write report"})
    clock.advance(seconds=seconds)

    text = call(store, "complete_todoodle", {"id": "1"})

    assert text.endswith(f"took {minutes} minutes)")
    assert call(store, "get_all_todoodles").endswith(f"✅ Completed in {minutes} minutes")


def test_all_todoodles_lists_status(store, clock):
    call(store, "add_todoodle", {"text": "Write report"})
    clock.advance(minutes=3)
    call(store, "add_todoodle", {"text": "Buy milk"})
    call(store, "complete_todoodle", {"id": "1"})

    lines = call(store, "get_all_todoodles").splitlines()

    assert lines[0] == "📋 All todoodles:"
    assert lines[1].startswith("- Buy milk (")
    assert lines[1].endswith(") - ⏳ Pending")
    assert lines[2].startswith("- Write report (")
    assert lines[2].endswith(") - ✅ Completed in 3 minutes")


def test_today_and_incomplete_todoodles(store, clock):
    call(store, "add_todoodle", {"text": "Write report"})
    call(store, "add_todoodle", {"text": "Buy milk"})
    call(store, "complete_todoodle", {"id": "2"})

    today = call(store, "get_today_todoodles")
    incomplete = call(store, "get_incomplete_todoodles")

    assert today.startswith("📅 Today's todoodles:\n")
    assert len(today.splitlines()) == 3
    created_at = format_time(store.todoodles[0].created_at)
    assert incomplete == f"📝 Incomplete todoodles:\n- Write report (created at {created_at})"


def test_search_todoodles(store):
    for text in ("buy milk", "buy eggs", "walk dog"):
        call(store, "add_todoodle", {"text": text})
    call(store, "complete_todoodle", {"id": "2"})

    text = call(store, "search_todoodles", {"query": "buy"})

    assert text == (
        "🔍 Found 2 matching todoodles:\n"
        "- ID: 1, Text: \"buy milk\" (⏳ Pending)\n"
        "- ID: 2, Text: \"buy eggs\" (✅ Completed)"
    )


def test_complete_todoodle_by_text(store):
    call(store, "add_todoodle", {"text": "walk dog"})

    assert call(store, "complete_todoodle_by_text", {"text": "cat"}) == "❌ No matching todoodle found to complete"
    assert call(store, "complete_todoodle_by_text", {"text": "DOG"}).startswith(
        "🎉 Completed todoodle: \"walk dog\" (ID: 1,"
    )


def test_delete_todoodle(store):
    call(store, "add_todoodle", {"text": "walk dog"})

    assert call(store, "delete_todoodle", {"id": "1"}) == "🗑️ Todoodle deleted successfully"
    assert call(store, "delete_todoodle", {"id": "1"}) == "❌ Todoodle not found"


def test_storage_info(store, todos_file):
    call(store, "add_todoodle", {"text": "walk dog"})

    text = call(store, "get_todoodle_storage_info")

    assert f"📍 Location: {todos_file.absolute()}" in text
    assert "📊 Total Todoodles: 1" in text
    assert "⏳ Pending: 1" in text


def test_unknown_tool_raises(store):
    with pytest.raises(ValueError, match="Unknown tool: make_coffee"):
        call(store, "make_coffee")


def test_missing_argument_raises(store):
    with pytest.raises(ValueError, match="'text'"):
        call(store, "add_todoodle", {})


def test_failed_save_raises(store, monkeypatch):
    def failing_write():
        raise OSError("disk full")

    monkeypatch.setattr(store, "_write", failing_write)

    with pytest.raises(PersistenceError):
        call(store, "add_todoodle", {"text": "Write report"})


def test_tools_over_mcp_session(store):
    async def scenario():
        server = create_server(store)
        async with create_connected_server_and_client_session(server) as client:
            tools = await client.list_tools()
            added = await client.call_tool("add_todoodle", {"text": "Write report"})
            unknown = await client.call_tool("make_coffee", {})
            return tools, added, unknown

    tools, added, unknown = asyncio.run(scenario())

    assert [tool.name for tool in tools.tools] == [tool.name for tool in TOOLS]
    assert not added.isError
    assert added.content[0].text.startswith("📝 Added todoodle: \"Write report\"")
    assert unknown.isError
    assert "Unknown tool: make_coffee" in unknown.content[0].text
    assert [todoodle.text for todoodle in store.todoodles] == ["Write report"]


def test_create_server_registers_tool_handlers(store):
    server = create_server(store)

    assert ListToolsRequest in server.request_handlers
    assert CallToolRequest in server.request_handlers
