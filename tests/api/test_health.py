"""Tests for health check endpoints."""

from fastapi.testclient import TestClient

from api import app


client = TestClient(app)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self):
        """Health endpoint should return 200 with status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"

    def test_health_is_public(self):
        """Health endpoint should not require a session."""
        client.cookies.clear()
        assert client.get("/api/health").status_code == 200

    def test_readiness_check(self, container):
        """Readiness endpoint should report the configured backends."""
        response = client.get("/api/ready")
        assert response.status_code == 200
        data = response.json()
        assert data == {
            "status": "ready",
            "storage": "memory",
            "throttle": "memory",
            "completion": "configured",
        }

    def test_health_response_structure(self):
        """Health response should have correct structure."""
        response = client.get("/api/health")
        assert set(response.json().keys()) == {"status", "version"}
