"""
Tests for health check endpoints.
"""
from fastapi.testclient import TestClient


def test_root_endpoint(client: TestClient):
    """Test the root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "OrderDesk API"
    assert "version" in data
    assert data["status"] == "running"


def test_health_check(client: TestClient):
    """Test the basic health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


def test_liveness_probe(client: TestClient):
    """Test the liveness probe endpoint."""
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_readiness_probe_reports_integrations(client: TestClient):
    response = client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["airtable"] == "configured"
    assert set(data["checks"]) == {"airtable", "stripe", "easypost", "email"}


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["x-request-id"] == "req-123"


def test_request_id_is_generated(client: TestClient):
    response = client.get("/health")

    assert len(response.headers["x-request-id"]) == 36


def test_unhandled_error_becomes_json_500(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom", headers={"X-Request-ID": "req-500"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "internal",
        "message": "Internal server error",
        "requestId": "req-500",
    }
