"""
Core utilities for the FTC Platform MCP server.

This package provides shared functionality such as logging configuration.
"""

from ftc_platform_mcp.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
