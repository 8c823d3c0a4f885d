"""
Tests for misc routes: health check.
"""


class TestHealthCheck:
    """Tests for /health endpoint."""

    def test_health_check_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data

    def test_health_check_without_scheduler(self, client):
        data = client.get("/health").json()
        # The test fixture does not start a scheduler
        assert data["scheduler_running"] is False
        assert data["last_refresh"] is None
