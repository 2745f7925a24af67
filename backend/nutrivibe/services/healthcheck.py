"""
Health check system.

Checks:
- API responsiveness
- Database connectivity (Supabase)
- LLM upstream (configuration and reachability)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import httpx

from nutrivibe.config import get_settings

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckResult:
    """Result of a single health check."""
    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0
    details: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class HealthReport:
    """Complete health report for the system."""
    status: HealthStatus
    checks: list[CheckResult]
    timestamp: datetime = field(default_factory=_utcnow)
    version: str = "1.0.0"

    @property
    def healthy_count(self) -> int:
        return sum(1 for c in self.checks if c.status == HealthStatus.HEALTHY)

    @property
    def total_count(self) -> int:
        return len(self.checks)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "summary": f"{self.healthy_count}/{self.total_count} checks passing",
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": round(c.latency_ms, 2),
                    "details": c.details,
                }
                for c in self.checks
            ]
        }


class HealthChecker:
    """Runs health checks against all system components."""

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks and return report."""
        checks = await asyncio.gather(
            self.check_api(),
            self.check_supabase(),
            self.check_llm(),
            return_exceptions=True,
        )

        # Convert exceptions to failed checks
        results = []
        for check in checks:
            if isinstance(check, Exception):
                results.append(CheckResult(
                    name="unknown",
                    status=HealthStatus.UNHEALTHY,
                    message=str(check),
                ))
            else:
                results.append(check)

        if all(c.status == HealthStatus.HEALTHY for c in results):
            overall = HealthStatus.HEALTHY
        else:
            overall = HealthStatus.DEGRADED

        return HealthReport(status=overall, checks=results)

    async def check_api(self) -> CheckResult:
        """Check API is responsive."""
        return CheckResult(
            name="api",
            status=HealthStatus.HEALTHY,
            message="API is responsive",
        )

    async def check_supabase(self) -> CheckResult:
        """Check Supabase database connectivity."""
        start = time.time()
        try:
            from nutrivibe.services.supabase import get_supabase_client, TABLES

            client = get_supabase_client()
            client.table(TABLES["profiles"]).select("user_id").limit(1).execute()

            return CheckResult(
                name="supabase",
                status=HealthStatus.HEALTHY,
                message="Database connected",
                latency_ms=(time.time() - start) * 1000,
                details={"connected": True},
            )
        except Exception as e:
            return CheckResult(
                name="supabase",
                status=HealthStatus.UNHEALTHY,
                message=f"Database error: {str(e)}",
                latency_ms=(time.time() - start) * 1000,
            )

    async def check_llm(self) -> CheckResult:
        """Check the LLM API key is set and the models endpoint answers."""
        settings = get_settings()
        start = time.time()

        if not settings.llm_configured:
            return CheckResult(
                name="llm",
                status=HealthStatus.DEGRADED,
                message="Not configured (GROQ_API_KEY missing)",
                details={"enabled": False},
            )

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{settings.llm_base_url.rstrip('/')}/models",
                    headers={"Authorization": f"Bearer {settings.groq_api_key}"},
                )

            latency = (time.time() - start) * 1000
            details = {"enabled": True, "model": settings.llm_model}

            if response.status_code == 200:
                return CheckResult(
                    name="llm",
                    status=HealthStatus.HEALTHY,
                    message="API reachable",
                    latency_ms=latency,
                    details=details,
                )
            return CheckResult(
                name="llm",
                status=HealthStatus.DEGRADED,
                message=f"API returned {response.status_code}",
                latency_ms=latency,
                details=details,
            )
        except Exception as e:
            return CheckResult(
                name="llm",
                status=HealthStatus.UNHEALTHY,
                message=f"API unreachable: {str(e)}",
                latency_ms=(time.time() - start) * 1000,
            )


# Singleton
_health_checker: Optional[HealthChecker] = None


def get_health_checker() -> HealthChecker:
    """Get health checker singleton."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker()
    return _health_checker
