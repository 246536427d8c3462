"""
Exception handlers for the FTC Platform MCP server.

This package contains the handlers translating gateway errors and unexpected
exceptions into JSON-RPC error bodies, and a setup function to register them
with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
