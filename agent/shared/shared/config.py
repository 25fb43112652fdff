"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server identity (reported by initialize and GET /)
    server_name: str = "google-docs-mcp"
    server_display_name: str = "Google Docs MCP Server"
    server_version: str = "1.0.0"
    server_description: str = "MCP server for Google Docs integration"
    protocol_version: str = "2024-11-05"

    # HTTP transport
    host: str = "0.0.0.0"
    port: int = 8080

    log_level: str = "info"

    # Google credentials. GOOGLE_OAUTH_TOKENS is a JSON object with
    # access_token and/or refresh_token; GOOGLE_TOKEN_FILE points at a file
    # of the same shape and is only read when the env var is empty.
    google_oauth_tokens: str = ""
    google_token_file: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost"
    google_api_timeout: float = 30.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
