"""Error taxonomy of the MCP gateway.

Two families of errors exist:

- Protocol-level errors (`SessionMissing`, `SessionInvalid`, `InvalidEnvelope`)
  are raised by the request router and turned into JSON-RPC error bodies by the
  server's exception handlers. They carry the JSON-RPC error code and the HTTP
  status used for the response.
- Dispatch-level errors (`UnknownTool`, `InvalidArguments`, `UpstreamFailure`)
  are raised inside the tool dispatcher and never leave it: the dispatcher
  converts them into a failed `InvocationResult`.

`ConfigurationFault` is fatal and only raised at startup.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

# JSON-RPC 2.0 reserved codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Implementation-defined server errors
SESSION_MISSING = -32000
SESSION_INVALID = -32001


class ErrorKind(str, Enum):
    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    UPSTREAM_FAILURE = "upstream_failure"


class GatewayError(Exception):
    """Base error for failures surfaced by the gateway core."""


class ProtocolError(GatewayError):
    """A request that cannot be routed to a session.

    Args:
        message: Human-readable error description.
        code: JSON-RPC error code placed in the error body.
        status_code: HTTP status of the response.
        request_id: Correlation id of the offending request, when it could be read.
    """

    code: int = INVALID_REQUEST
    status_code: int = 400

    def __init__(self, message: str, *, request_id: Optional[Any] = None, data: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.data = data


class SessionMissing(ProtocolError):
    """A non-handshake request arrived without a session identifier."""

    code = SESSION_MISSING
    status_code = 400

    def __init__(self, *, request_id: Optional[Any] = None) -> None:
        super().__init__("No session ID provided. Initialize first.", request_id=request_id)


class SessionInvalid(ProtocolError):
    """The session identifier is unknown, expired or already closed."""

    code = SESSION_INVALID
    status_code = 404

    def __init__(self, session_id: str, *, request_id: Optional[Any] = None) -> None:
        super().__init__("Invalid session ID or session expired", request_id=request_id)
        self.session_id = session_id


class InvalidEnvelope(ProtocolError):
    """The body is not a JSON-RPC 2.0 message."""

    code = INVALID_REQUEST
    status_code = 400


class ParseFailure(InvalidEnvelope):
    """The body is not valid JSON."""

    code = PARSE_ERROR


class DispatchError(GatewayError):
    """Failure of a single tool invocation.

    Args:
        message: Human-readable error description.
        tool: Name of the tool that failed.
    """

    kind: ErrorKind

    def __init__(self, message: str, *, tool: str) -> None:
        super().__init__(message)
        self.message = message
        self.tool = tool


class UnknownTool(DispatchError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool: str) -> None:
        super().__init__(f"Unknown tool: {tool}", tool=tool)


class InvalidArguments(DispatchError):
    kind = ErrorKind.INVALID_ARGUMENTS

    def __init__(self, tool: str, parameter: str, reason: str = "is required") -> None:
        super().__init__(f"{parameter} {reason}", tool=tool)
        self.parameter = parameter


class UpstreamFailure(DispatchError):
    """The upstream call failed: network error, non-success status or ``success: false``."""

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        message: str,
        *,
        tool: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, tool=tool)
        self.status_code = status_code
        self.details = details


class ConfigurationFault(GatewayError):
    """Required credentials or base URL are absent. The process must not start."""
