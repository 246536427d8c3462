"""
Main Application Entry Point.

This module builds the FastAPI application: it validates the configuration,
wires the platform API client into the MCP gateway, configures CORS and
includes the health and MCP routers.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ftc_platform_mcp import SERVER_NAME, __version__
from ftc_platform_mcp.core.logging_config import get_logger
from ftc_platform_mcp.gateway import ConfigurationFault, RequestRouter, create_router
from ftc_platform_mcp.upstream import PlatformApiClient

from .api import health, mcp
from .core.config import Settings, validate_configuration
from .exception_handlers import setup_exception_handlers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Starts the session reaper on startup. On shutdown closes every live
    session, then the upstream HTTP client.
    """
    gateway: RequestRouter = app.state.router
    logger.info(f"Starting up {SERVER_NAME} {__version__}...")
    gateway.store.start()

    yield

    logger.info(f"Shutting down {SERVER_NAME} gracefully...")
    await gateway.store.close_all()
    await gateway.store.stop()
    await app.state.api_client.aclose()
    logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None, api_client: Optional[PlatformApiClient] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        api_client: Platform API client; built from ``settings`` when omitted

    Raises:
        ConfigurationFault: the platform API base URL or key is missing
    """
    settings = settings or Settings()
    if api_client is None:
        api = validate_configuration(settings)
        api_client = PlatformApiClient(api.base_url, api_key=api.api_key, timeout=api.timeout)

    status = api_client.get_status()
    if not status.configured:
        raise ConfigurationFault(
            f"MCP Server configuration invalid: base URL={status.base_url or '<unset>'}, has API key={status.has_api_key}"
        )
    logger.info(
        "Configuration valid: API Base URL=%s, API Key=%s (configured), Environment=%s",
        status.base_url,
        "*" * 8,
        settings.environment,
    )

    app = FastAPI(
        title=SERVER_NAME,
        description="""
        FTC Platform MCP Server

        A standalone HTTP MCP server providing AI tools for the FTC Platform
        by proxying requests to the platform REST API endpoints.
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.api_client = api_client
    app.state.router = create_router(api_client)

    cors = settings.cors
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=cors.allow_headers,
        expose_headers=cors.expose_headers,
    )

    setup_exception_handlers(app)
    app.include_router(health.router, tags=["health"])
    app.include_router(mcp.router, tags=["mcp"])
    return app
