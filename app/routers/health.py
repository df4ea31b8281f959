"""
Health Check Router

Provides health check endpoints for monitoring application status.
"""

from fastapi import APIRouter, Depends, HTTPException
from app.core.settings import Settings, get_settings
from app.models.api import HealthCheckResponse
import time
import os
import sys
from datetime import datetime

# Initialize router
router = APIRouter()

# Application start time for uptime calculation
_start_time = time.time()


def _storage_status(settings: Settings) -> dict:
    data_dir = settings.data_dir
    return {
        "data_dir": str(data_dir),
        "exists": data_dir.is_dir(),
        "writable": data_dir.is_dir() and os.access(data_dir, os.W_OK),
    }


@router.get("/health", response_model=HealthCheckResponse, summary="Basic Health Check")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Basic health check endpoint

    Returns application status, version, and environment information.
    This endpoint is used by load balancers and monitoring systems.
    """
    return HealthCheckResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.utcnow(),
        uptime=time.time() - _start_time,
    )


@router.get("/health/detailed", summary="Detailed Health Check")
async def detailed_health_check(settings: Settings = Depends(get_settings)):
    """
    Detailed health check including content storage status
    """
    storage = _storage_status(settings)
    return {
        "status": "healthy" if storage["writable"] else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.utcnow().isoformat(),
        "uptime": time.time() - _start_time,
        "services": {"storage": storage},
        "details": {
            "cors_origins": settings.cors_origins,
            "max_upload_size": settings.max_upload_size,
            "python_version": sys.version,
            "startup_time": datetime.fromtimestamp(_start_time).isoformat(),
        },
    }


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(settings: Settings = Depends(get_settings)):
    """
    Kubernetes-style readiness probe

    Returns 200 once extracted packages can be written to DATA_DIR,
    503 otherwise.
    """
    storage = _storage_status(settings)
    if not storage["writable"]:
        raise HTTPException(
            status_code=503,
            detail=f"Application not ready: {storage['data_dir']} is not writable",
        )
    return {"status": "ready", "timestamp": datetime.utcnow().isoformat()}


@router.get("/health/live", summary="Liveness Check")
async def liveness_check():
    """
    Kubernetes-style liveness probe
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }
