"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ftc_platform_mcp.gateway.errors import ConfigurationFault

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class PlatformApiConfig(BaseModel):
    """FTC Platform REST API configuration."""

    base_url: str = Field(
        default="http://localhost:3000/api/mastra",
        alias="VERCEL_API_BASE_URL",
        description="Base URL of the platform REST API",
    )
    api_key: Optional[str] = Field(
        default=None, alias="MASTRA_API_KEY", description="Bearer token for the platform REST API"
    )
    timeout: float = Field(
        default=30.0, gt=0, alias="UPSTREAM_TIMEOUT", description="Timeout (seconds) of one upstream request"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    expose_headers: list[str] = Field(
        default=["Mcp-Session-Id"], alias="CORS_EXPOSE_HEADERS", description="Response headers visible to browsers"
    )
    allow_headers: list[str] = Field(
        default=["Content-Type", "mcp-session-id", "Authorization"],
        alias="CORS_ALLOW_HEADERS",
        description="Allowed request headers",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # MCP Server Configuration
    # =====================================================================
    host: str = Field(default="0.0.0.0", description="Host address to bind to", alias="MCP_HOST")
    port: int = Field(default=3001, description="Port number of the MCP server", alias="MCP_PORT")
    environment: str = Field(default="development", description="Deployment environment name", alias="NODE_ENV")
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="MCP_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="simple, detailed or json", alias="MCP_LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory of the log file", alias="MCP_LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write logs to a file", alias="MCP_ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # Platform API Configuration
    # =====================================================================
    vercel_api_base_url: str = Field(default="http://localhost:3000/api/mastra", alias="VERCEL_API_BASE_URL")
    mastra_api_key: Optional[str] = Field(default=None, alias="MASTRA_API_KEY")
    upstream_timeout: float = Field(default=30.0, gt=0, alias="UPSTREAM_TIMEOUT")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_expose_headers: list[str] = Field(default=["Mcp-Session-Id"], alias="CORS_EXPOSE_HEADERS")
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "mcp-session-id", "Authorization"], alias="CORS_ALLOW_HEADERS"
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def platform_api(self) -> PlatformApiConfig:
        """Get platform API configuration from environment variables."""
        return PlatformApiConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


def validate_configuration(settings: Settings) -> PlatformApiConfig:
    """Fail fast when the platform API cannot be reached with credentials.

    Raises:
        ConfigurationFault: base URL or API key is missing.
    """
    api = settings.platform_api
    if not api.base_url or not api.api_key:
        raise ConfigurationFault(
            "MCP Server configuration invalid:\n"
            f"- Base URL: {api.base_url or '<unset>'}\n"
            f"- Has API Key: {bool(api.api_key)}\n\n"
            "Please ensure VERCEL_API_BASE_URL and MASTRA_API_KEY are set in your environment."
        )
    return api
