"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter

from ftc_platform_mcp import SERVER_NAME, __version__
from ftc_platform_mcp.gateway.dispatcher import utc_timestamp
from ftc_platform_mcp.server.services.deps import ApiClientDep, RouterDep

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the MCP server and its API client.",
    response_description="Status object.",
)
async def health_check(api_client: ApiClientDep, gateway: RouterDep):
    """
    Health check endpoint.

    Reports process status, the API client's configuration flags and the
    number of live MCP sessions.
    """
    return {
        "status": "ok",
        "timestamp": utc_timestamp(),
        "server": SERVER_NAME,
        "version": __version__,
        "apiClient": api_client.get_status().to_payload(),
        "activeSessions": gateway.store.count(),
    }


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the MCP server.",
    response_description="Version object.",
)
async def version():
    return {"server": SERVER_NAME, "version": __version__}
