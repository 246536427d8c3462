"""
MCP Streamable HTTP Endpoint.

``POST /mcp`` carries JSON-RPC messages, ``DELETE /mcp`` ends a session.
The session id travels in the ``Mcp-Session-Id`` header in both directions.
Responses are always plain JSON; server-initiated SSE streams are not offered.
"""

import json
from typing import Annotated, Optional

from fastapi import APIRouter, Header, Request, Response
from fastapi.responses import JSONResponse

from ftc_platform_mcp.gateway import SESSION_HEADER, RoutedResponse
from ftc_platform_mcp.gateway.errors import METHOD_NOT_FOUND, ParseFailure
from ftc_platform_mcp.gateway.messages import JSONRPCResponse
from ftc_platform_mcp.server.services.deps import RouterDep

router = APIRouter()

SessionIdHeader = Annotated[Optional[str], Header(alias="mcp-session-id")]


def _to_http(routed: RoutedResponse) -> Response:
    headers = {SESSION_HEADER: routed.session_id} if routed.session_id else None
    if routed.body is None:
        return Response(status_code=routed.status_code, headers=headers)
    return JSONResponse(status_code=routed.status_code, content=routed.body, headers=headers)


@router.post(
    "/mcp",
    summary="MCP Message",
    description="Send one JSON-RPC 2.0 message. Send `initialize` without a session header to open a session.",
)
async def post_message(request: Request, gateway: RouterDep, mcp_session_id: SessionIdHeader = None) -> Response:
    raw = await request.body()
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise ParseFailure("Parse error: request body is not valid JSON") from e
    routed = await gateway.handle_message(mcp_session_id, body)
    return _to_http(routed)


@router.delete(
    "/mcp",
    summary="Terminate Session",
    description="End the session named by the `Mcp-Session-Id` header.",
)
async def delete_session(gateway: RouterDep, mcp_session_id: SessionIdHeader = None) -> Response:
    routed = await gateway.terminate(mcp_session_id)
    return _to_http(routed)


@router.get("/mcp", summary="Server Stream", description="Server-initiated streams are not supported.")
async def open_stream() -> Response:
    body = JSONRPCResponse.fail(None, METHOD_NOT_FOUND, "Method not allowed: server-initiated streams are not supported")
    return JSONResponse(status_code=405, content=body.to_body(), headers={"Allow": "POST, DELETE"})
