"""HTTP server of the FTC Platform MCP gateway (FastAPI)."""
