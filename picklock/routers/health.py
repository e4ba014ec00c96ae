"""
Health check and monitoring endpoints.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from picklock.config import settings
from picklock.models import HealthStatus

router = APIRouter(tags=["monitoring"])

# Track application start time
START_TIME = time.time()


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """
    Health check endpoint.

    The service keeps no external dependencies, so it is healthy
    whenever it answers.
    """
    return HealthStatus(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=time.time() - START_TIME,
        timestamp=datetime.now(timezone.utc)
    )


@router.get("/health/live")
async def liveness_check():
    """Liveness probe."""
    return {"status": "alive"}


@router.get(settings.metrics_path)
async def metrics():
    """
    Prometheus metrics endpoint.

    Returns analysis counts and durations per strategy in Prometheus
    text format.
    """
    if not settings.enable_metrics:
        return Response(status_code=404)

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/info")
async def info():
    """Service information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "max_iterations": settings.max_iterations,
        "workers_per_offset": settings.workers_per_offset,
        "uptime_seconds": time.time() - START_TIME
    }
