"""Health check and monitoring endpoints."""

import asyncio
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from cinelist.api.schemas import HealthResponse, ServiceHealth
from cinelist.core.config import get_settings
from cinelist.services.cache import CacheManager, get_cache_manager

router = APIRouter(tags=["Health"])

CacheDep = Annotated[CacheManager, Depends(get_cache_manager)]

# Track server start time for uptime calculation
_server_start_time = datetime.now(timezone.utc)


def _get_system_info() -> dict[str, Any]:
    """Get system information for health endpoints."""
    return {
        "hostname": platform.node(),
        "platform": platform.system(),
        "python_version": sys.version.split()[0],
        "architecture": platform.machine(),
    }


def _get_uptime() -> dict[str, Any]:
    """Calculate server uptime."""
    now = datetime.now(timezone.utc)
    delta = now - _server_start_time

    days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    return {
        "started_at": _server_start_time.isoformat(),
        "uptime_seconds": int(delta.total_seconds()),
        "uptime_human": f"{days}d {hours}h {minutes}m {seconds}s",
    }


async def _timed_health_check(
    name: str,
    check_fn: Any,
    timeout: float = 5.0,
) -> tuple[str, bool, float, str | None]:
    """Execute a health check and measure its latency with timeout.

    Returns:
        Tuple of (name, healthy, latency_ms, error_message)
    """
    start = time.perf_counter()
    try:
        result = await asyncio.wait_for(check_fn(), timeout=timeout)
        latency = (time.perf_counter() - start) * 1000
        return (name, result, latency, None)
    except asyncio.TimeoutError:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, f"Health check timed out after {timeout}s")
    except Exception as e:
        latency = (time.perf_counter() - start) * 1000
        return (name, False, latency, str(e))


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API information and basic health status",
)
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    settings = get_settings()

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "documentation": "/docs",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Comprehensive health check",
    response_description="Detailed health status of all services",
)
async def health_check(cache: CacheDep) -> HealthResponse:
    """
    Comprehensive health check endpoint for monitoring.

    Checks:
    - **Cache**: Redis/Upstash connectivity and response time
    - **TMDB**: whether upstream credentials are configured

    The cache is optional. A missing or failing cache reports ``degraded``
    because the API keeps serving uncached data.
    """
    settings = get_settings()
    services: dict[str, ServiceHealth] = {}
    overall_status = "healthy"

    if cache.is_available:
        _, healthy, latency, error = await _timed_health_check("cache", cache.check_health)
        cache_details: dict[str, Any] = {"type": "redis", "provider": "upstash"}
        if error:
            cache_details["error"] = error
        services["cache"] = ServiceHealth(
            status="healthy" if healthy else "degraded",
            latency_ms=round(latency, 2),
            details=cache_details,
        )
        if not healthy:
            overall_status = "degraded"
    else:
        services["cache"] = ServiceHealth(
            status="degraded",
            details={"type": "redis", "provider": "not configured"},
        )
        overall_status = "degraded"

    if settings.tmdb_configured:
        services["tmdb"] = ServiceHealth(status="healthy", details={"base_url": settings.tmdb_base_url})
    else:
        services["tmdb"] = ServiceHealth(status="unhealthy", details={"error": "credentials not configured"})
        overall_status = "unhealthy"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        services=services,
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    response_description="Simple liveness check for orchestrators",
)
async def liveness() -> dict[str, str]:
    """Returns 200 if the service process is running."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/ready",
    summary="Readiness probe",
    response_description="Readiness check for load balancers",
)
async def readiness() -> JSONResponse:
    """
    Readiness probe endpoint.

    Ready when TMDB credentials are configured. The cache is not consulted:
    the API serves correctly without it.
    """
    if not get_settings().tmdb_configured:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "tmdb_not_configured",
                "message": "TMDB_API_KEY or TMDB_READ_ACCESS_TOKEN is required",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get(
    "/health/info",
    summary="System information",
    response_description="Detailed system and runtime information",
)
async def system_info() -> dict[str, Any]:
    """Application metadata, system information and uptime."""
    settings = get_settings()

    return {
        "application": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
        "system": _get_system_info(),
        "uptime": _get_uptime(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/cache",
    summary="Cache health check",
    response_description="Detailed cache connectivity status",
)
async def cache_health(cache: CacheDep) -> JSONResponse:
    """
    Check cache (Redis/Upstash) connectivity and response time.

    Always 200: the cache is optional, so an outage is reported as degraded.
    """
    if not cache.is_available:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "service": "cache",
                "type": "redis",
                "provider": "not configured",
                "status": "degraded",
                "message": "Cache service is not configured",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    _, healthy, latency, error = await _timed_health_check("cache", cache.check_health)

    response_data: dict[str, Any] = {
        "service": "cache",
        "type": "redis",
        "provider": "upstash",
        "status": "healthy" if healthy else "degraded",
        "latency_ms": round(latency, 2),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if error:
        response_data["error"] = error

    return JSONResponse(status_code=status.HTTP_200_OK, content=response_data)
