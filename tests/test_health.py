"""Tests for health and info routes."""

from fastapi.testclient import TestClient


def test_health_reports_engine(client: TestClient) -> None:
    resp = client.get("/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["engine_available"] is True
    assert data["uptime_seconds"] >= 0
    assert data["memory_rss_mb"] > 0
    assert data["memory_available_mb"] > 0
    assert "timestamp" in data


def test_root_info(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "WebPrint"
