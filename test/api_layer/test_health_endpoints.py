# ============================================================================
# FILE: test/api_layer/test_health_endpoints.py
# Health, readiness and liveness endpoints
# ============================================================================

import pytest
from sqlalchemy.exc import OperationalError


class TestHealthEndpoints:
    """Test health, readiness, and liveness endpoints."""

    # ========================================================================
    # /healthz - Database Connectivity
    # ========================================================================

    def test_health_check_db_connected(self, client, mock_db):
        """DB connected -> 200"""
        response = client.get("/healthz")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        mock_db.execute.assert_called_once()

    def test_health_check_db_disconnected(self, client, mock_db):
        """DB disconnected -> 503"""
        mock_db.execute.side_effect = OperationalError("SELECT 1", None, Exception("refused"))

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"

    # ========================================================================
    # /ready, /live
    # ========================================================================

    def test_readiness(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_liveness(self, client):
        response = client.get("/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_trace_id_echoed(self, client):
        response = client.get("/live", headers={"X-Trace-ID": "trace-abc"})
        assert response.headers["X-Trace-ID"] == "trace-abc"

    def test_trace_id_generated(self, client):
        response = client.get("/live")
        assert response.headers.get("X-Trace-ID")
