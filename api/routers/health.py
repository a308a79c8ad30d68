"""
Health check endpoints.

Provides basic and detailed health check functionality.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from api.schemas.common import (
    HealthStatus,
    HealthCheckResponse,
    DetailedHealthCheckResponse,
    ComponentHealth,
)
from core.config import get_settings, Settings
from core.redis import RedisHealthCheck
from database import is_database_available

router = APIRouter(prefix="/health", tags=["health"])

# Track application start time for uptime calculation
_start_time = time.time()


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Basic health check",
    description="Quick health check endpoint for load balancers and container orchestration.",
)
async def health_check() -> HealthCheckResponse:
    """
    Basic health check.

    Returns a simple healthy status if the API is running.
    """
    return HealthCheckResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/detailed",
    response_model=DetailedHealthCheckResponse,
    summary="Detailed health check",
    description="Comprehensive health check with status of all components.",
)
async def detailed_health_check(
    settings: Settings = Depends(get_settings),
) -> DetailedHealthCheckResponse:
    """
    Detailed health check with component status.

    Checks the health of:
    - Database (content, identities, favorites)
    - Redis (favorites cache, optional)
    """
    components = {}
    overall_status = HealthStatus.HEALTHY

    # Check Database
    if is_database_available():
        components["database"] = ComponentHealth(status=HealthStatus.HEALTHY)
    else:
        components["database"] = ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            error="Database not configured" if not settings.is_database_configured
            else "Database not initialized",
        )
        overall_status = HealthStatus.UNHEALTHY

    # Check Redis; the favorites cache degrades to a no-op without it
    redis_health = await RedisHealthCheck.check()
    if redis_health["status"] == "healthy":
        components["redis"] = ComponentHealth(
            status=HealthStatus.HEALTHY,
            latency_ms=redis_health.get("latency_ms"),
        )
    else:
        components["redis"] = ComponentHealth(
            status=HealthStatus.DEGRADED,
            error=redis_health.get("error") or redis_health["status"],
        )
        if overall_status == HealthStatus.HEALTHY:
            overall_status = HealthStatus.DEGRADED

    # Calculate uptime
    uptime_seconds = time.time() - _start_time

    return DetailedHealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        environment=settings.environment,
        uptime_seconds=round(uptime_seconds, 2),
        components=components,
    )


@router.get(
    "/ready",
    response_model=HealthCheckResponse,
    summary="Readiness check",
    description="Check if the application is ready to accept traffic.",
)
async def readiness_check() -> HealthCheckResponse:
    """
    Readiness check for Kubernetes.

    Ready once the database is initialized; Redis is optional.
    """
    status = HealthStatus.HEALTHY if is_database_available() else HealthStatus.UNHEALTHY
    return HealthCheckResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/live",
    response_model=HealthCheckResponse,
    summary="Liveness check",
    description="Check if the application is alive.",
)
async def liveness_check() -> HealthCheckResponse:
    """
    Liveness check for Kubernetes.

    Simple check that the application process is running.
    """
    return HealthCheckResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(timezone.utc),
    )
