"""JSON-RPC 2.0 envelope models exchanged on the ``/mcp`` endpoint."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError

from .errors import InvalidEnvelope

RequestId = Union[StrictStr, StrictInt]

INITIALIZE_METHOD = "initialize"


class JSONRPCMessage(BaseModel):
    """Any inbound JSON-RPC 2.0 message: request, notification or client response."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    id: Optional[RequestId] = None
    method: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    result: Optional[Any] = None
    error: Optional[Any] = None

    @property
    def is_request(self) -> bool:
        return self.method is not None and self.id is not None

    @property
    def is_notification(self) -> bool:
        return self.method is not None and self.id is None

    @property
    def is_handshake(self) -> bool:
        return self.is_request and self.method == INITIALIZE_METHOD


class JSONRPCError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None
    id: Optional[RequestId] = None

    @classmethod
    def ok(cls, request_id: Optional[RequestId], result: Any) -> "JSONRPCResponse":
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json", by_alias=True, exclude_none=True)
        return cls(id=request_id, result=result)

    @classmethod
    def fail(
        cls, request_id: Optional[RequestId], code: int, message: str, data: Optional[Any] = None
    ) -> "JSONRPCResponse":
        return cls(id=request_id, error=JSONRPCError(code=code, message=message, data=data))

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result if self.result is not None else {}
        return body


def parse_message(body: Any) -> JSONRPCMessage:
    """Validate a decoded request body as a single JSON-RPC 2.0 message."""
    if isinstance(body, list):
        raise InvalidEnvelope("Batch requests are not supported")
    if not isinstance(body, dict):
        raise InvalidEnvelope("Invalid Request: expected a JSON-RPC 2.0 object")
    try:
        message = JSONRPCMessage.model_validate(body)
    except ValidationError as e:
        raw_id = body.get("id")
        request_id = raw_id if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool) else None
        raise InvalidEnvelope(
            "Invalid Request: not a JSON-RPC 2.0 message", request_id=request_id, data=str(e)
        ) from e
    if message.method is None and message.result is None and message.error is None:
        raise InvalidEnvelope("Invalid Request: missing method", request_id=message.id)
    return message
