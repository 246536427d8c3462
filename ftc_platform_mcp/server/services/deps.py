"""
Gateway Dependencies.

Provides the request router and the platform API client owned by the running
application to API endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request

from ftc_platform_mcp.gateway import RequestRouter
from ftc_platform_mcp.upstream import PlatformApiClient


def get_router(request: Request) -> RequestRouter:
    return request.app.state.router


def get_api_client(request: Request) -> PlatformApiClient:
    return request.app.state.api_client


RouterDep = Annotated[RequestRouter, Depends(get_router)]
ApiClientDep = Annotated[PlatformApiClient, Depends(get_api_client)]
