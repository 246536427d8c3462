from __future__ import annotations

import asyncio
import json

import pytest
from mcp.types import LATEST_PROTOCOL_VERSION

from ftc_platform_mcp import SERVER_NAME, __version__
from ftc_platform_mcp.gateway import SessionClosed, SessionContext, ToolDispatcher, ToolRegistry
from ftc_platform_mcp.gateway.errors import INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND
from ftc_platform_mcp.gateway.messages import parse_message

pytestmark = pytest.mark.asyncio

EVENT_ID = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def events() -> "asyncio.Queue[SessionClosed]":
    return asyncio.Queue()


@pytest.fixture
def context(stub_api_client, events) -> SessionContext:
    return SessionContext("session-1", ToolDispatcher(ToolRegistry(), stub_api_client), events)


async def _send(context: SessionContext, body):
    response = await context.admit(parse_message(body))
    return response.to_body() if response is not None else None


async def _initialized(context: SessionContext, make_initialize) -> SessionContext:
    await _send(context, make_initialize())
    return context


async def test_initialize_negotiates_requested_version(context, make_initialize):
    body = await _send(context, make_initialize(request_id=1, protocol_version="2024-11-05"))

    assert body["id"] == 1
    result = body["result"]
    assert result["protocolVersion"] == "2024-11-05"
    assert result["serverInfo"] == {"name": SERVER_NAME, "version": __version__}
    assert result["capabilities"]["tools"] == {"listChanged": False}
    assert context.initialized
    assert context.protocol_version == "2024-11-05"
    assert context.client_info.name == "test-client"


async def test_initialize_falls_back_to_latest_version(context, make_initialize):
    body = await _send(context, make_initialize(protocol_version="1999-01-01"))

    assert body["result"]["protocolVersion"] == LATEST_PROTOCOL_VERSION


async def test_second_initialize_is_rejected(context, make_initialize):
    await _initialized(context, make_initialize)

    body = await _send(context, make_initialize(request_id=2))

    assert body["error"]["code"] == INVALID_REQUEST
    assert body["error"]["message"] == "Session already initialized"


async def test_initialize_with_bad_params(context):
    body = await _send(context, {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})

    assert body["error"]["code"] == INVALID_PARAMS
    assert not context.initialized


async def test_requests_before_initialize_are_rejected(context):
    body = await _send(context, {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

    assert body["error"]["code"] == INVALID_REQUEST
    assert body["error"]["message"] == "Session not initialized"


async def test_notifications_produce_no_response(context, make_initialize):
    await _initialized(context, make_initialize)

    assert await _send(context, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
    assert await _send(context, {"jsonrpc": "2.0", "method": "notifications/cancelled", "params": {}}) is None


async def test_client_responses_are_ignored(context, make_initialize):
    await _initialized(context, make_initialize)

    assert await _send(context, {"jsonrpc": "2.0", "id": 9, "result": {}}) is None


async def test_ping(context, make_initialize):
    await _initialized(context, make_initialize)

    body = await _send(context, {"jsonrpc": "2.0", "id": "p", "method": "ping"})

    assert body == {"jsonrpc": "2.0", "id": "p", "result": {}}


async def test_tools_list(context, make_initialize):
    await _initialized(context, make_initialize)

    body = await _send(context, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

    tools = body["result"]["tools"]
    assert [t["name"] for t in tools] == [
        "test_connection",
        "get_event_applications",
        "get_event_evaluations",
        "get_evaluation_criteria",
        "get_application_questions",
    ]
    assert tools[1]["inputSchema"]["required"] == ["eventId"]


async def test_unknown_method(context, make_initialize):
    await _initialized(context, make_initialize)

    body = await _send(context, {"jsonrpc": "2.0", "id": 3, "method": "resources/list"})

    assert body["error"]["code"] == METHOD_NOT_FOUND


async def test_tools_call_success(context, make_initialize, make_call_tool):
    await _initialized(context, make_initialize)

    body = await _send(context, make_call_tool(4, "get_event_applications", {"eventId": EVENT_ID}))

    result = body["result"]
    assert body["id"] == 4
    assert result["isError"] is False
    assert json.loads(result["content"][0]["text"])["eventId"] == EVENT_ID


async def test_tools_call_failure_is_a_result_not_an_error(context, make_initialize, make_call_tool):
    await _initialized(context, make_initialize)

    body = await _send(context, make_call_tool(5, "get_event_applications", {}))

    assert "error" not in body
    assert body["result"]["isError"] is True
    assert json.loads(body["result"]["content"][0]["text"])["error"] == "eventId is required"


async def test_tools_call_without_name(context, make_initialize):
    await _initialized(context, make_initialize)

    body = await _send(context, {"jsonrpc": "2.0", "id": 6, "method": "tools/call", "params": {}})

    assert body["error"]["code"] == INVALID_PARAMS


async def test_duplicate_in_flight_request_id(context, make_initialize, make_call_tool, stub_api_client):
    await _initialized(context, make_initialize)
    stub_api_client.delay = 0.05

    first = context.admit(parse_message(make_call_tool(7, "test_connection")))
    second = await context.admit(parse_message(make_call_tool(7, "test_connection")))

    assert second.error.code == INVALID_REQUEST
    assert (await first).result["isError"] is False
    assert stub_api_client.call_count == 1


async def test_result_is_discarded_when_closed_in_flight(context, make_initialize, make_call_tool, stub_api_client):
    await _initialized(context, make_initialize)
    stub_api_client.delay = 0.05

    pending = asyncio.ensure_future(context.admit(parse_message(make_call_tool(8, "test_connection"))))
    await asyncio.sleep(0)
    await context.close(reason="terminated")

    assert await pending is None
    assert stub_api_client.call_count == 1


async def test_close_is_idempotent_and_announced_once(context, events):
    await context.close(reason="first")
    await context.close(reason="second")

    assert context.closed
    assert events.qsize() == 1
    assert events.get_nowait() == SessionClosed(session_id="session-1", reason="first")
