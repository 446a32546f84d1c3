"""Schemas for the RPC-style liveness ping."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Body returned by ``POST /v1/health/ping``."""

    status: HealthStatus = Field(..., description="Service status")
    service: str = Field(..., description="Service name as reported to tracing and logs")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    version: str = Field(..., description="Running build version")
