"""
Common Pydantic schemas used across the API.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error detail for API responses."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional error details"
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    error: ErrorDetail


class HealthStatus(str, Enum):
    """Health check status enum."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: HealthStatus
    latency_ms: Optional[float] = None
    error: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class HealthCheckResponse(BaseModel):
    """Basic health check response."""

    status: HealthStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now())


class DetailedHealthCheckResponse(BaseModel):
    """Detailed health check response with component status."""

    status: HealthStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now())
    version: str
    environment: str
    uptime_seconds: float
    components: Dict[str, ComponentHealth] = Field(
        default_factory=dict,
        description="Health status of each component"
    )
