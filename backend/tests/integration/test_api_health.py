"""
Integration tests for health and status endpoints.

These tests verify the API is responding correctly.
"""

import pytest
from unittest.mock import patch, AsyncMock

from nutrivibe.services.healthcheck import CheckResult, HealthReport, HealthStatus


def report(supabase_status):
    return HealthReport(
        status=HealthStatus.DEGRADED,
        checks=[
            CheckResult(name="api", status=HealthStatus.HEALTHY),
            CheckResult(name="supabase", status=supabase_status),
            CheckResult(name="llm", status=HealthStatus.DEGRADED),
        ],
    )


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.integration
    def test_health_endpoint(self, client):
        """Health endpoint should return 200."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    @pytest.mark.integration
    def test_health_detailed(self, client):
        """Detailed health endpoint should return system info."""
        response = client.get("/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert "system" in data
        assert "configured" in data["llm"]

    @pytest.mark.integration
    def test_root_endpoint(self, client):
        """Root endpoint should return API info."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["endpoints"]["ai"] == "/api/ai"

    @pytest.mark.integration
    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["live"] is True

    @pytest.mark.integration
    def test_ready_ignores_llm(self, client):
        """A degraded LLM does not make the service unready."""
        with patch("nutrivibe.api.health.get_health_checker") as mock:
            mock.return_value.run_all_checks = AsyncMock(return_value=report(HealthStatus.HEALTHY))
            response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True

    @pytest.mark.integration
    def test_not_ready_without_database(self, client):
        with patch("nutrivibe.api.health.get_health_checker") as mock:
            mock.return_value.run_all_checks = AsyncMock(return_value=report(HealthStatus.UNHEALTHY))
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.integration
    def test_services_report(self, client):
        with patch("nutrivibe.api.health.get_health_checker") as mock:
            mock.return_value.run_all_checks = AsyncMock(return_value=report(HealthStatus.HEALTHY))
            response = client.get("/health/services")

        assert response.status_code == 200
        assert response.json()["summary"] == "2/3 checks passing"


class TestAPIKey:
    """Tests for the X-API-Key middleware."""

    @pytest.mark.integration
    def test_protected_route_requires_key(self, client):
        from nutrivibe.main import settings
        with patch.object(settings, "api_key", "secret"):
            response = client.get("/api/subscription/plans")
        assert response.status_code == 401

    @pytest.mark.integration
    def test_valid_key_passes(self, client):
        from nutrivibe.main import settings
        with patch.object(settings, "api_key", "secret"):
            response = client.get("/api/subscription/plans", headers={"X-API-Key": "secret"})
        assert response.status_code == 200

    @pytest.mark.integration
    def test_health_is_public(self, client):
        from nutrivibe.main import settings
        with patch.object(settings, "api_key", "secret"):
            assert client.get("/health").status_code == 200
            assert client.get("/health/live").status_code == 200
