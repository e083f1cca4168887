"""
Tests for health check endpoints.
"""

import pytest

from rest_api.core.lifespan import check_configuration, prepare_media_root
from shared.config.settings import settings
from shared.utils.health import HealthStatus, aggregate_health_results, sync_health_check_with_timeout


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "rest-api"
        assert data["environment"] == "test"

    def test_detailed_health_check(self, client):
        """Detailed check reports the database component."""
        response = client.get("/api/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "database" in data["dependencies"]

    def test_health_has_correlation_id(self, client):
        """Responses carry a request ID header."""
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_invalid_request_id_is_replaced(self, client):
        """Request IDs outside the allowed charset are not echoed back."""
        response = client.get("/api/health", headers={"X-Request-ID": "not valid!"})
        request_id = response.headers["X-Request-ID"]
        assert request_id != "not valid!"
        assert len(request_id) == 32


class TestSecurityMiddlewares:
    """Test security headers and body content type checks."""

    def test_security_headers_present(self, client):
        """Every response carries the security headers."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]
        assert "server" not in response.headers

    def test_no_hsts_outside_production(self, client):
        """HSTS is only sent in production."""
        response = client.get("/api/health")
        assert "Strict-Transport-Security" not in response.headers

    def test_auth_responses_not_cached(self, client):
        """Auth endpoints answer with Cache-Control: no-store."""
        response = client.post("/api/auth/login", json={"username": "nobody", "password": "wrong"})
        assert response.status_code == 401
        assert response.headers["Cache-Control"] == "no-store"

    def test_unsupported_content_type(self, client):
        """Plain text bodies are rejected with 415."""
        response = client.post(
            "/api/auth/login",
            content=b"username=x",
            headers={"Content-Type": "text/plain"},
        )
        assert response.status_code == 415
        assert "application/json" in response.json()["detail"]

    def test_multipart_only_on_upload_paths(self, client):
        """Multipart bodies are refused outside the image upload endpoint."""
        response = client.post(
            "/api/auth/login",
            files={"file": ("a.txt", b"x", "text/plain")},
        )
        assert response.status_code == 415


class TestHealthHelpers:
    """Test health check decorators and aggregation."""

    def test_failing_check_is_unhealthy(self):
        """Exceptions inside a check become an unhealthy result."""

        @sync_health_check_with_timeout(timeout=1.0, component="broken")
        def broken():
            raise RuntimeError("down")

        result = broken()
        assert result.status == HealthStatus.UNHEALTHY
        aggregated = aggregate_health_results([result])
        assert aggregated["status"] == HealthStatus.DEGRADED.value


class TestStartup:
    """Test the startup steps run by the lifespan."""

    def test_production_with_defaults_refuses_to_start(self, monkeypatch):
        """Insecure production settings abort startup."""
        monkeypatch.setattr(settings, "environment", "production")
        with pytest.raises(RuntimeError, match="Refusing to start"):
            check_configuration()

    def test_development_defaults_only_warn(self, monkeypatch):
        """Outside production the same settings are accepted."""
        monkeypatch.setattr(settings, "environment", "development")
        check_configuration()

    def test_media_root_created(self, tmp_path, monkeypatch):
        """The upload directory exists after startup."""
        target = tmp_path / "uploads"
        monkeypatch.setattr(settings, "media_root", str(target))
        assert prepare_media_root() == target
        assert target.is_dir()
