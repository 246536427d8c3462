"""Per-session MCP protocol handling.

A `SessionContext` is owned by exactly one session. It tracks the handshake
state of that session and turns inbound JSON-RPC messages into responses:

- ``initialize``: once per session; a second handshake is rejected.
- ``notifications/*``: accepted without a response.
- ``ping``, ``tools/list``, ``tools/call``.

Admission (`admit`) is synchronous and runs inside the session's critical
section. The returned awaitable does the slow part (the upstream call) outside
of it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Set

from mcp import types as mcp_types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from pydantic import ValidationError

from ftc_platform_mcp import SERVER_NAME, __version__

from .dispatcher import ToolDispatcher
from .errors import INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND
from .messages import INITIALIZE_METHOD, JSONRPCMessage, JSONRPCResponse, RequestId

INITIALIZED_NOTIFICATION = "notifications/initialized"


@dataclass(frozen=True)
class SessionClosed:
    """Emitted on the store's event channel when a context closes."""

    session_id: str
    reason: str


async def _resolved(response: Optional[JSONRPCResponse]) -> Optional[JSONRPCResponse]:
    return response


class SessionContext:
    def __init__(
        self,
        session_id: str,
        dispatcher: ToolDispatcher,
        events: "asyncio.Queue[SessionClosed]",
    ) -> None:
        self.session_id = session_id
        self._dispatcher = dispatcher
        self._events = events
        self._logger = logging.getLogger(__name__)
        self._initialized = False
        self._client_ready = False
        self._closed = False
        self._protocol_version: Optional[str] = None
        self._client_info: Optional[mcp_types.Implementation] = None
        self._in_flight: Set[RequestId] = set()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def protocol_version(self) -> Optional[str]:
        return self._protocol_version

    @property
    def client_info(self) -> Optional[mcp_types.Implementation]:
        return self._client_info

    def admit(self, message: JSONRPCMessage) -> Awaitable[Optional[JSONRPCResponse]]:
        """Accept one message and return the awaitable producing its response.

        Notifications and client responses resolve to ``None``.
        """
        if message.is_notification:
            self._on_notification(message)
            return _resolved(None)
        if not message.is_request:
            self._logger.debug("Session %s: ignoring client response id=%s", self.session_id, message.id)
            return _resolved(None)

        request_id = message.id
        if request_id in self._in_flight:
            return _resolved(
                JSONRPCResponse.fail(request_id, INVALID_REQUEST, f"Request id {request_id!r} is already in flight")
            )

        method = message.method
        if method == INITIALIZE_METHOD:
            return _resolved(self._on_initialize(message))
        if not self._initialized:
            return _resolved(JSONRPCResponse.fail(request_id, INVALID_REQUEST, "Session not initialized"))
        if method == "ping":
            return _resolved(JSONRPCResponse.ok(request_id, {}))
        if method == "tools/list":
            return _resolved(self._on_list_tools(request_id))
        if method == "tools/call":
            try:
                params = mcp_types.CallToolRequestParams.model_validate(message.params or {})
            except ValidationError as e:
                return _resolved(JSONRPCResponse.fail(request_id, INVALID_PARAMS, "Invalid params", str(e)))
            self._in_flight.add(request_id)
            return self._call_tool(request_id, params)

        return _resolved(JSONRPCResponse.fail(request_id, METHOD_NOT_FOUND, f"Method not found: {method}"))

    def _on_notification(self, message: JSONRPCMessage) -> None:
        if message.method == INITIALIZED_NOTIFICATION:
            self._client_ready = True
            self._logger.debug("Session %s: client initialized", self.session_id)
        else:
            self._logger.debug("Session %s: ignoring notification %s", self.session_id, message.method)

    def _on_initialize(self, message: JSONRPCMessage) -> JSONRPCResponse:
        if self._initialized:
            return JSONRPCResponse.fail(message.id, INVALID_REQUEST, "Session already initialized")
        try:
            params = mcp_types.InitializeRequestParams.model_validate(message.params or {})
        except ValidationError as e:
            return JSONRPCResponse.fail(message.id, INVALID_PARAMS, "Invalid initialize params", str(e))

        requested = str(params.protocolVersion)
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else mcp_types.LATEST_PROTOCOL_VERSION
        self._protocol_version = version
        self._client_info = params.clientInfo
        self._initialized = True
        self._logger.info(
            "Session %s: initialized by %s %s (protocol %s)",
            self.session_id,
            params.clientInfo.name,
            params.clientInfo.version,
            version,
        )
        result = mcp_types.InitializeResult(
            protocolVersion=version,
            capabilities=mcp_types.ServerCapabilities(tools=mcp_types.ToolsCapability(listChanged=False)),
            serverInfo=mcp_types.Implementation(name=SERVER_NAME, version=__version__),
        )
        return JSONRPCResponse.ok(message.id, result)

    def _on_list_tools(self, request_id: Any) -> JSONRPCResponse:
        tools = [descriptor.to_mcp_tool() for descriptor in self._dispatcher.registry.list()]
        return JSONRPCResponse.ok(request_id, mcp_types.ListToolsResult(tools=tools))

    async def _call_tool(
        self, request_id: RequestId, params: mcp_types.CallToolRequestParams
    ) -> Optional[JSONRPCResponse]:
        try:
            result = await self._dispatcher.invoke(params.name, params.arguments, request_id=request_id)
        finally:
            self._in_flight.discard(request_id)
        if self._closed:
            self._logger.info(
                "Session %s closed while %s was in flight; discarding result", self.session_id, params.name
            )
            return None
        return JSONRPCResponse.ok(request_id, result.to_call_tool_result())

    async def close(self, reason: str = "closed") -> None:
        """Close the context. Idempotent; emits `SessionClosed` once."""
        if self._closed:
            return
        self._closed = True
        self._logger.info("Session %s: closing (%s)", self.session_id, reason)
        await self._events.put(SessionClosed(session_id=self.session_id, reason=reason))
