from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from mcp import types as mcp_types
from pydantic import BaseModel, Field

from ftc_platform_mcp.upstream import PlatformApiClient, UpstreamApiError

from .errors import DispatchError, ErrorKind, UnknownTool, UpstreamFailure
from .messages import RequestId
from .registry import ToolRegistry


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2025-01-01T00:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_payload(payload: Any) -> str:
    """Stable pretty-printed JSON rendering of a tool payload."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


class InvocationRequest(BaseModel):
    """One request to execute a tool."""

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[RequestId] = None


class InvocationResult(BaseModel):
    """The normalized outcome of one tool invocation.

    Exactly one of the success fields (`payload`) or the failure fields
    (`error`, `error_kind`) is meaningful, as indicated by `ok`.
    """

    ok: bool
    tool: str
    request_id: Optional[RequestId] = None
    text: str
    payload: Optional[Any] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    timestamp: str = Field(default_factory=utc_timestamp)

    @classmethod
    def success(cls, tool: str, payload: Any, *, request_id: Optional[RequestId] = None) -> "InvocationResult":
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return cls(ok=True, tool=tool, request_id=request_id, payload=payload, text=render_payload(payload))

    @classmethod
    def failure(cls, error: DispatchError, *, request_id: Optional[RequestId] = None) -> "InvocationResult":
        timestamp = utc_timestamp()
        body: Dict[str, Any] = {
            "success": False,
            "error": error.message,
            "tool": error.tool,
            "timestamp": timestamp,
            "details": f"Failed to execute MCP tool: {error.tool}",
        }
        if isinstance(error, UpstreamFailure) and error.status_code is not None:
            body["statusCode"] = error.status_code
        return cls(
            ok=False,
            tool=error.tool,
            request_id=request_id,
            text=render_payload(body),
            error=error.message,
            error_kind=error.kind,
            timestamp=timestamp,
        )

    def to_call_tool_result(self) -> mcp_types.CallToolResult:
        return mcp_types.CallToolResult(
            content=[mcp_types.TextContent(type="text", text=self.text)],
            isError=not self.ok,
        )


class ToolDispatcher:
    """
    Validates and executes tool invocations against the platform API client.

    - Unregistered names and invalid arguments are rejected before any upstream call.
    - Every invocation yields exactly one `InvocationResult`; failures are
      reported as results, never raised.
    - Nothing is retried.
    """

    def __init__(self, registry: ToolRegistry, client: PlatformApiClient) -> None:
        self._registry = registry
        self._client = client
        self._logger = logging.getLogger(__name__)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def invoke(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        request_id: Optional[RequestId] = None,
    ) -> InvocationResult:
        self._logger.info("Executing tool: %s (request_id=%s)", name, request_id)
        try:
            tool = self._registry.get(name)
            if tool is None:
                raise UnknownTool(name)
            parsed = tool.parse_arguments(arguments)
            payload = await self._call_upstream(name, tool.run(self._client, parsed))
        except DispatchError as e:
            self._logger.error("Tool execution failed: %s [%s] %s", name, e.kind.value, e.message)
            return InvocationResult.failure(e, request_id=request_id)
        return InvocationResult.success(name, payload, request_id=request_id)

    async def dispatch(self, request: InvocationRequest) -> InvocationResult:
        return await self.invoke(request.name, request.arguments, request_id=request.request_id)

    async def _call_upstream(self, name: str, call: Any) -> Any:
        try:
            return await call
        except UpstreamApiError as e:
            raise UpstreamFailure(str(e), tool=name, status_code=e.status_code, details=e.details) from e
        except Exception as e:
            self._logger.warning("Unexpected upstream failure in tool %s", name, exc_info=True)
            raise UpstreamFailure(str(e) or type(e).__name__, tool=name) from e
