"""Tests for health endpoints."""

from fastapi.testclient import TestClient

from complaint_api.main import app

client = TestClient(app)


def test_health_check():
    """Test health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "complaint-api"


def test_readiness_check():
    """Test readiness endpoint."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": True, "attachment_store": True}


def test_root():
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "Complaint Management API"


def test_correlation_id_is_echoed():
    """Test that a supplied correlation ID comes back on the response."""
    response = client.get("/health", headers={"x-correlation-id": "corr-123"})
    assert response.headers["x-correlation-id"] == "corr-123"


def test_correlation_id_is_generated():
    """Test that a correlation ID is generated when none is supplied."""
    response = client.get("/health")
    assert response.headers["x-correlation-id"]


def test_metrics_endpoint():
    """Test that Prometheus metrics are exposed."""
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "complaints_submitted_total" in response.text
