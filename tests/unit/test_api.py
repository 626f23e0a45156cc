"""
Unit Tests - Metrics API
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from arr_analytics import process_export
from arr_analytics.serving.api import create_api_app


@pytest.fixture
def client():
    return TestClient(create_api_app())


class TestHealthEndpoints:
    """Tests for health routes"""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    def test_request_id_echoed(self, client):
        response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


class TestMetricsEndpoint:
    """Tests for export upload"""

    def test_upload_export(self, client, stripe_export_text):
        response = client.post(
            "/api/v1/metrics",
            params={"now": "2024-06-15T12:00:00"},
            files={"file": ("charges.csv", stripe_export_text.encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["metrics"]["arr"]["total"] == 230.0
        assert body["metrics"]["arr"]["netNewARR"] == 130.0
        assert len(body["metrics"]["netNewARRChart"]) == 12
        assert body["metrics"]["netNewARRChart"][-1]["month"] == "Jun 2024"
        assert body["diagnostics"]["transactions"] == 5

    def test_upload_matches_direct_processing(self, client, stripe_export_text):
        response = client.post(
            "/api/v1/metrics",
            params={"now": "2024-06-15T12:00:00"},
            files={"file": ("charges.csv", stripe_export_text.encode("utf-8"), "text/csv")},
        )

        expected = process_export(stripe_export_text, datetime(2024, 6, 15, 12, 0))
        assert response.json() == expected.model_dump(by_alias=True, mode="json")

    def test_cents_threshold_parameter(self, client):
        content = b"id,customer,amount,created,interval\nch_1,cus_1,2500,2024-03-01,month\n"

        response = client.post(
            "/api/v1/metrics",
            params={"now": "2024-06-15T00:00:00", "cents_threshold": 1000},
            files={"file": ("charges.csv", content, "text/csv")},
        )

        assert response.json()["metrics"]["arr"]["total"] == 25.0

    def test_empty_upload_rejected(self, client):
        response = client.post(
            "/api/v1/metrics",
            files={"file": ("empty.csv", b"", "text/csv")},
        )

        assert response.status_code == 422
        assert "no header row" in response.json()["detail"]

    def test_non_positive_threshold_rejected(self, client, stripe_export_text):
        response = client.post(
            "/api/v1/metrics",
            params={"cents_threshold": 0},
            files={"file": ("charges.csv", stripe_export_text.encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 422
