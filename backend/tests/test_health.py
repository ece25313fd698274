"""
Tests for health status resolution, the entity monitor and health endpoints.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.utils.health import (
    HealthStatus,
    aggregate_health_checks,
    combine_statuses,
    health_check_with_timeout,
)

from qc_api.entities import CUSTOMER
from qc_api.generic.health import EntityHealthMonitor, resolve_health_status


class TestResolveHealthStatus:

    @pytest.mark.parametrize("database,table,records,expected", [
        (True, True, True, HealthStatus.HEALTHY),
        (True, True, False, HealthStatus.DEGRADED),
        (True, False, False, HealthStatus.UNHEALTHY),
        (False, False, False, HealthStatus.UNHEALTHY),
    ])
    def test_status(self, database, table, records, expected):
        assert resolve_health_status(database, table, records) == expected


class TestEntityHealthMonitor:

    def monitor(self):
        database = MagicMock()
        database.ping = AsyncMock()
        database.table_exists = AsyncMock(return_value=True)
        database.fetch_one = AsyncMock(return_value={"total": 4, "active": 3, "last_updated": "2025-01-01"})
        return EntityHealthMonitor(CUSTOMER.config, database), database

    @pytest.mark.asyncio
    async def test_healthy(self):
        monitor, _ = self.monitor()

        result = await monitor.health()

        assert result.status == HealthStatus.HEALTHY
        assert result.metrics == {"total": 4, "active": 3, "inactive": 1, "lastUpdated": "2025-01-01"}

    @pytest.mark.asyncio
    async def test_metrics_failure_is_degraded(self):
        monitor, database = self.monitor()
        database.fetch_one.side_effect = RuntimeError("permission denied")

        result = await monitor.health()

        assert result.status == HealthStatus.DEGRADED
        assert result.checks == {"database": True, "table": True, "records": False}

    @pytest.mark.asyncio
    async def test_database_down_skips_later_checks(self):
        monitor, database = self.monitor()
        database.ping.side_effect = OSError("refused")

        result = await monitor.health()

        assert result.status == HealthStatus.UNHEALTHY
        database.table_exists.assert_not_called()
        database.fetch_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_to_dict(self):
        monitor, _ = self.monitor()
        body = (await monitor.health()).to_dict()
        assert body["status"] == "healthy"
        assert set(body) == {"status", "checks", "metrics", "timestamp"}


class TestHealthHelpers:

    def test_combine_statuses(self):
        healthy, degraded, unhealthy = HealthStatus.HEALTHY, HealthStatus.DEGRADED, HealthStatus.UNHEALTHY
        assert combine_statuses([healthy, healthy]) == healthy
        assert combine_statuses([unhealthy, unhealthy]) == unhealthy
        assert combine_statuses([healthy, unhealthy]) == degraded
        assert combine_statuses([healthy, degraded]) == degraded

    @pytest.mark.asyncio
    async def test_timeout_reports_unhealthy(self):
        @health_check_with_timeout(timeout=0.01, component="slow")
        async def check_slow():
            await asyncio.sleep(1)

        result = await check_slow()
        assert result.status == HealthStatus.UNHEALTHY
        assert result.error == "timeout after 0.01s"

    @pytest.mark.asyncio
    async def test_reported_status_overrides(self):
        @health_check_with_timeout(timeout=1, component="entity:customer")
        async def check_entity():
            return {"status": "degraded", "checks": {"records": False}}

        result = await aggregate_health_checks([check_entity()])
        assert result["status"] == "degraded"
        assert result["components"]["entity:customer"]["details"] == {"checks": {"records": False}}


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "qc-api"

    def test_detailed_health_check(self, client):
        response = client.get("/api/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"]["details"] == {"dialect": "sqlite"}
        assert "entity:customer_site" in data["components"]

    def test_entity_health(self, client):
        response = client.get("/api/customers/health")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"
        assert body["data"]["checks"]["table"] is True
