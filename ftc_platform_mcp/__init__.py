"""FTC Platform MCP Gateway.

A standalone HTTP MCP server that exposes FTC Platform data to AI clients by
proxying tool invocations to the platform's REST API.

High-level architecture
-----------------------

- ``ftc_platform_mcp.gateway``:

  - ``SessionStore``: owns every live MCP session and its protocol context.
  - ``RequestRouter``: classifies each HTTP request as a handshake, a request
    for an existing session, or an invalid request.
  - ``ToolRegistry`` / ``ToolDispatcher``: the static tool catalog and the
    component that validates and executes tool invocations.

- ``ftc_platform_mcp.upstream``:

  - ``PlatformApiClient``: thin async HTTP client for the platform REST API.

- ``ftc_platform_mcp.server``:

  - FastAPI application factory, settings, health endpoints and the ``/mcp``
    streamable HTTP endpoint.

Typical workflow
----------------

1. ``POST /mcp`` with an ``initialize`` request and no session header.
2. Read the ``Mcp-Session-Id`` response header.
3. Send ``tools/list`` and ``tools/call`` requests carrying that header.
4. ``DELETE /mcp`` to end the session.
"""

SERVER_NAME = "ftc-platform-mcp"
__version__ = "1.0.0"
