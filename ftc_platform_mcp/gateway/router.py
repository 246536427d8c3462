"""HTTP-facing request router.

For every request on the MCP endpoint the router decides whether it is:

1. a request for an existing session (``Mcp-Session-Id`` header present): the
   session must be live, otherwise `SessionInvalid`;
2. a handshake (no header, ``initialize`` request): a new session is created
   and its id is returned in the response header;
3. anything else without a header: `SessionMissing`.

No tool can therefore run before a handshake has produced a session id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import SessionInvalid, SessionMissing
from .messages import JSONRPCMessage, JSONRPCResponse, parse_message
from .session_store import SessionStore

SESSION_HEADER = "Mcp-Session-Id"


@dataclass
class RoutedResponse:
    """What the HTTP layer must send back."""

    status_code: int
    body: Optional[Dict[str, Any]] = None
    session_id: Optional[str] = None

    @classmethod
    def from_rpc(cls, response: Optional[JSONRPCResponse], session_id: Optional[str]) -> "RoutedResponse":
        if response is None:
            return cls(status_code=202, session_id=session_id)
        return cls(status_code=200, body=response.to_body(), session_id=session_id)


class RequestRouter:
    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    @property
    def store(self) -> SessionStore:
        return self._store

    async def handle_message(self, session_id: Optional[str], body: Any) -> RoutedResponse:
        """Route one decoded JSON-RPC body (``POST``)."""
        message = parse_message(body)
        if session_id:
            return await self._forward(session_id, message)
        if not message.is_handshake:
            self._logger.debug("Rejecting %s without session id", message.method)
            raise SessionMissing(request_id=message.id)
        return await self._handshake(message)

    async def terminate(self, session_id: Optional[str]) -> RoutedResponse:
        """Client-initiated session termination (``DELETE``)."""
        if not session_id:
            raise SessionMissing()
        async with self._store.exclusive(session_id) as session:
            await session.context.close(reason="terminated by client")
        return RoutedResponse(status_code=200, session_id=session_id)

    async def _forward(self, session_id: str, message: JSONRPCMessage) -> RoutedResponse:
        async with self._store.exclusive(session_id, request_id=message.id) as session:
            pending = session.context.admit(message)
        response = await pending
        if response is None and message.is_request:
            # the session was closed while the request was in flight
            raise SessionInvalid(session_id, request_id=message.id)
        return RoutedResponse.from_rpc(response, session_id)

    async def _handshake(self, message: JSONRPCMessage) -> RoutedResponse:
        session = await self._store.create()
        async with self._store.exclusive(session.session_id, request_id=message.id):
            pending = session.context.admit(message)
        response = await pending
        if not session.context.initialized:
            await self._store.remove(session.session_id)
            return RoutedResponse.from_rpc(response, None)
        return RoutedResponse.from_rpc(response, session.session_id)
