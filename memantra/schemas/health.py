"""Pydantic schemas for health check responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["healthy"] = Field(default="healthy", description="Service status")
    environment: str = Field(description="Current app environment (dev, prod or test)")
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity at the time of the check",
    )
    timestamp: datetime = Field(description="Server time (UTC) when the check ran")
    uptime: float = Field(ge=0, description="Seconds since the process started")
