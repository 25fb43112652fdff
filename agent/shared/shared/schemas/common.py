"""Common schemas used across services."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Standard health check response."""

    status: str = "healthy"
    service: str
    timestamp: str
    provider: str


class ServerInfo(BaseModel):
    """Static metadata served by ``GET /``."""

    name: str
    version: str
    description: str
