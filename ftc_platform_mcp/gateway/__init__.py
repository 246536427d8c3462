from typing import Optional

from ftc_platform_mcp.upstream import PlatformApiClient

from .dispatcher import InvocationRequest, InvocationResult, ToolDispatcher
from .errors import (
    ConfigurationFault,
    ErrorKind,
    InvalidArguments,
    InvalidEnvelope,
    ProtocolError,
    SessionInvalid,
    SessionMissing,
    UnknownTool,
    UpstreamFailure,
)
from .protocol import SessionClosed, SessionContext
from .registry import ToolDescriptor, ToolParameter, ToolRegistry
from .router import SESSION_HEADER, RequestRouter, RoutedResponse
from .session_store import Session, SessionStore


def create_router(client: PlatformApiClient, registry: Optional[ToolRegistry] = None) -> RequestRouter:
    """Wire registry, dispatcher, session store and router around an API client."""
    dispatcher = ToolDispatcher(registry or ToolRegistry(), client)
    store = SessionStore(lambda session_id, events: SessionContext(session_id, dispatcher, events))
    return RequestRouter(store)


__all__ = [
    "create_router",
    "ConfigurationFault",
    "ErrorKind",
    "InvalidArguments",
    "InvalidEnvelope",
    "InvocationRequest",
    "InvocationResult",
    "ProtocolError",
    "RequestRouter",
    "RoutedResponse",
    "SESSION_HEADER",
    "Session",
    "SessionClosed",
    "SessionContext",
    "SessionInvalid",
    "SessionMissing",
    "SessionStore",
    "ToolDescriptor",
    "ToolDispatcher",
    "ToolParameter",
    "ToolRegistry",
    "UnknownTool",
    "UpstreamFailure",
]
