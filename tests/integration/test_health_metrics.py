"""Integration tests for /health, /healthz, /metrics and /."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.tripguard.api.deps import get_document_store
from backend.tripguard.db.inmemory import InMemoryDocumentStore
from backend.tripguard.main import app


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Create test client on an in-memory store."""
    app.dependency_overrides[get_document_store] = lambda: InMemoryDocumentStore()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_returns_200_when_store_ok(self, client: TestClient) -> None:
        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["store"] == "ok"
        # Test env has no provider keys
        assert data["components"]["google"] == "not_configured"
        assert data["components"]["detour_selector"] == "stub"

    @patch("backend.tripguard.api.routes.health.check_store", new_callable=AsyncMock)
    def test_healthz_returns_503_when_store_fails(
        self, mock_check_store: AsyncMock, client: TestClient
    ) -> None:
        """Test /healthz returns 503 when the document store is unreachable."""
        mock_check_store.return_value = (False, "error: ConnectionRefusedError")

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["store"] == "error: ConnectionRefusedError"


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_returns_prometheus_format(self, client: TestClient) -> None:
        # Record at least one check so the labelled series exists
        client.post(
            "/check",
            json={
                "traveler_id": "metrics-probe",
                "now": "2026-10-18T14:00:00+09:00",
                "current_lat": 35.68,
                "current_lng": 139.76,
            },
        )

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        body = response.text
        assert "itinerary_checks_total" in body
        assert 'itinerary_checks_total{status="ok"}' in body
        assert "provider_latency_ms" in body


def test_root(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Tripguard API"
