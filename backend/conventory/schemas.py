"""
Response and request schemas for the operational endpoints.

Health (liveness) and setup (database check / candidate connection test).
"""

from typing import Literal

from pydantic import Field
from sqlmodel import SQLModel

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class ServicesStatus(SQLModel):
    database: Literal["connected", "disconnected"]
    application: Literal["running"] = "running"


class HealthResponse(SQLModel):
    """Body of GET /health (200 when healthy, 503 otherwise)."""

    status: Literal["healthy", "unhealthy"]
    timestamp: str
    services: ServicesStatus
    latency: float | None = Field(default=None, description="Probe round trip in ms.")
    error: str | None = None


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


class ConnectionSummary(SQLModel):
    type: str | None
    info: dict
    latency: str | None = None
    status: Literal["connected", "disconnected"]


class DatabaseCheckResult(SQLModel):
    """Response for /setup/check-database and /setup/test-database."""

    success: bool
    connection: ConnectionSummary
    message: str
    error: str | None = None


class DatabaseTestIn(SQLModel):
    """Body for POST /setup/test-database; the candidate connection string."""

    connection_string: str = Field(..., alias="connectionString", min_length=1)
