"""Integration tests for the health check route."""

import pytest
from httpx import AsyncClient
from pytest_mock import MockerFixture

from b2bvendas.core.config import get_settings


@pytest.mark.integration
class TestHealth:
    """Test the health check with and without a working database."""

    async def test_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == get_settings().app_version
        assert body["checks"]["database"]["status"] == "up"
        assert "error" not in body["checks"]["database"]
        assert body["checks"]["emailQueue"]["running"] is False
        assert body["uptime"] >= 0

    async def test_degraded_when_worker_should_run(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("EMAIL_CONFIG__WORKER_ENABLED", "true")
        get_settings.cache_clear()

        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    async def test_unhealthy_without_database(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "b2bvendas.api.routes.health.check_database_connection",
            new_callable=mocker.AsyncMock,
            return_value=(False, "connection refused"),
        )

        response = await client.get("/api/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["database"] == {
            "status": "down",
            "responseTime": body["checks"]["database"]["responseTime"],
            "error": "connection refused",
        }
