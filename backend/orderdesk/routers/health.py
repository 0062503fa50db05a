"""
Health check and monitoring endpoints.
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from orderdesk.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict:
    """API root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@router.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


@router.get("/health/ready")
async def readiness_check() -> dict:
    """
    Readiness probe - checks if the service can handle requests.
    Reports which upstream integrations are configured; only the
    record store is required.
    """
    checks = {
        "airtable": "configured" if settings.airtable_api_key and settings.airtable_base_id else "missing",
        "stripe": "configured" if settings.stripe_secret_key else "missing",
        "easypost": "configured" if settings.easypost_api_key else "missing",
        "email": "configured" if settings.resend_api_key else "missing",
    }
    is_ready = checks["airtable"] == "configured"

    return {
        "status": "ready" if is_ready else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    """
    Liveness probe - checks if the service is alive.
    Simple check that doesn't verify dependencies.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
