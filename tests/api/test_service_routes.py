"""
Tests for the root, health and fallback routes.
"""

from fastapi.testclient import TestClient

from slideflix.api.main import app

client = TestClient(app)


def test_root():
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "running"
    assert data["service"] == "SlideFlix Video Generator"
    assert data["endpoints"] == ["/health", "/generate-video"]


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ok"
    assert "timestamp" in data
    assert data["uptime"] >= 0
    assert data["service"] == "SlideFlix Video Generator"


def test_unknown_route_is_json_404():
    response = client.get("/does-not-exist")
    assert response.status_code == 404

    data = response.json()
    assert data["success"] is False
    assert data["errorType"] == "not_found"
    assert data["details"]["path"] == "/does-not-exist"


def test_wrong_method():
    response = client.get("/generate-video")
    assert response.status_code == 405
    assert response.json()["errorType"] == "http_error"
