"""Health check endpoints."""

import platform
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from nutrivibe.config import get_settings
from nutrivibe.services.healthcheck import get_health_checker, HealthStatus

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {
        "status": "healthy",
        "timestamp": _now(),
    }


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with system info."""
    settings = get_settings()

    # CPU
    cpu_percent = psutil.cpu_percent(interval=0.1)
    cpu_count = psutil.cpu_count()

    # Memory
    memory = psutil.virtual_memory()

    # Disk
    disk = psutil.disk_usage("/")

    return {
        "status": "healthy",
        "timestamp": _now(),
        "environment": settings.environment,
        "llm": {
            "configured": settings.llm_configured,
            "model": settings.llm_model,
        },
        "system": {
            "platform": platform.system(),
            "machine": platform.machine(),
            "python": platform.python_version(),
        },
        "cpu": {
            "percent": cpu_percent,
            "cores": cpu_count,
        },
        "memory": {
            "used_gb": round(memory.used / (1024**3), 2),
            "total_gb": round(memory.total / (1024**3), 2),
            "percent": memory.percent,
        },
        "disk": {
            "used_gb": round(disk.used / (1024**3), 2),
            "total_gb": round(disk.total / (1024**3), 2),
            "percent": disk.percent,
        },
    }


@router.get("/health/services")
async def services_health():
    """
    Health of every dependency.

    Checks:
    - API responsiveness
    - Supabase database
    - LLM endpoint
    """
    checker = get_health_checker()
    report = await checker.run_all_checks()

    return report.to_dict()


@router.get("/health/ready")
async def readiness_check():
    """
    Readiness check.

    Returns 200 if the API and database are up, 503 otherwise. A missing
    or unreachable LLM only degrades generation.
    """
    checker = get_health_checker()
    report = await checker.run_all_checks()

    critical_services = ["api", "supabase"]
    critical_healthy = all(
        c.status == HealthStatus.HEALTHY
        for c in report.checks
        if c.name in critical_services
    )

    if critical_healthy:
        return {"ready": True, "status": report.status.value}
    return JSONResponse(status_code=503, content={"ready": False, "status": report.status.value})


@router.get("/health/live")
async def liveness_check():
    """If we can respond, we're alive."""
    return {"live": True, "timestamp": _now()}
