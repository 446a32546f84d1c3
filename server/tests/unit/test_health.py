"""Unit tests for the service info and ping endpoints."""

import pytest

from bookinghub.core.config import Settings
from bookinghub.workers import WorkerManager


@pytest.mark.asyncio
async def test_info_reports_features(test_client):
    response = await test_client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "bookinghub-api"
    assert set(data["features"]) == {"authentication", "payments", "crm_notifications", "tracing"}
    assert all(isinstance(enabled, bool) for enabled in data["features"].values())
    assert data["endpoints"]["metrics"] == "/metrics"


@pytest.mark.asyncio
async def test_info_without_workers(test_client):
    """Apps started without a worker manager report no workers."""
    response = await test_client.get("/info")

    assert response.json()["workers"] == {}


@pytest.mark.asyncio
async def test_info_reports_worker_runs(test_app, test_client, test_database):
    workers = WorkerManager(test_database, Settings(availability_audit_interval_seconds=900))
    test_app.state.workers = workers
    await workers.get_worker("availability_audit").run_once()

    response = await test_client.get("/info")

    audit = response.json()["workers"]["availability_audit"]
    assert audit["running"] is False
    assert audit["interval_seconds"] == 900
    assert audit["runs"] == 1
    assert audit["last_result"] == 0
    assert audit["last_error"] is None


@pytest.mark.asyncio
async def test_health_ping_rpc(test_client):
    """The POST ping names the service and never needs the database."""
    response = await test_client.post("/v1/health/ping", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "bookinghub-api"
    assert "timestamp" in data
