"""
Restaurant CRM Backend - Probe & Console Schemas
=================================================

What:  Response models for /health, /info and /db-console/.
Who:   Load balancers, container health checks, developers.
"""

from typing import Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Health check response.

    A backend that cannot reach its database reports "unhealthy", so the
    check covers the request path end-to-end rather than process liveness.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class InfoResponse(BaseModel):
    name: str = Field(description="Application name")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    access_policy: str = Field(description="Active access policy name")


class ConsoleResponse(BaseModel):
    """Read-only overview of the connected database (development only)."""
    dialect: str = Field(description="SQLAlchemy dialect name, e.g. postgresql, sqlite")
    tables: Dict[str, int] = Field(description="Row count per mapped table")
