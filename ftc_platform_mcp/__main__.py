"""Run the MCP server: ``python -m ftc_platform_mcp``."""

import sys

import uvicorn

from ftc_platform_mcp.core.logging_config import get_logger, setup_logging
from ftc_platform_mcp.gateway import ConfigurationFault
from ftc_platform_mcp.server.core.config import Settings
from ftc_platform_mcp.server.main import create_app

logger = get_logger("ftc_platform_mcp")


def main() -> None:
    settings = Settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    try:
        app = create_app(settings)
    except ConfigurationFault as e:
        logger.error(f"Failed to start FTC Platform MCP Server: {e}")
        sys.exit(1)

    logger.info(f"MCP endpoint: http://{settings.host}:{settings.port}/mcp")
    logger.info(f"Health check: http://{settings.host}:{settings.port}/health")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
