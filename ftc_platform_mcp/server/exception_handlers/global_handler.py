"""
Exception Handlers for the FastAPI Application.

Two handlers are registered:

- `protocol_error_handler` turns routing failures (missing or invalid session,
  malformed envelope) into JSON-RPC error bodies with the error's HTTP status.
- `global_exception_handler` catches every other unhandled exception, logs it
  with full request context and answers with a JSON-RPC internal error.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ftc_platform_mcp.core.logging_config import get_logger
from ftc_platform_mcp.gateway.errors import INTERNAL_ERROR, ProtocolError
from ftc_platform_mcp.gateway.messages import JSONRPCResponse

logger = get_logger(__name__)


async def protocol_error_handler(request: Request, exc: ProtocolError) -> JSONResponse:
    """
    Convert a `ProtocolError` raised by the request router into a JSON-RPC error.

    Args:
        request: The HTTP request that was rejected
        exc: The routing error

    Returns:
        JSONResponse with the JSON-RPC error body and the error's HTTP status
    """
    logger.warning(
        f"Rejected {request.method} {request.url.path}: {type(exc).__name__}: {exc.message}",
    )
    body = JSONRPCResponse.fail(exc.request_id, exc.code, exc.message, exc.data).to_body()
    return JSONResponse(status_code=exc.status_code, content=body)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON-RPC internal error with an
    error ID that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    body = JSONRPCResponse.fail(
        None,
        INTERNAL_ERROR,
        "Internal error",
        {"error_id": error_id, "error_type": type(exc).__name__, "detail": str(exc)},
    ).to_body()
    return JSONResponse(status_code=500, content=body)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ProtocolError, protocol_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
