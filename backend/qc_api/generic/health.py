"""
Per-entity health and statistics.

Health runs three checks in order: database connectivity, table existence
and the metrics query. A check that fails is logged and recorded as False;
later checks that depend on it are skipped. Nothing is cached.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from shared.config.constants import AuditFields
from shared.config.logging import get_logger
from shared.infrastructure.db import Database
from shared.utils.exceptions import wrap_database_errors
from shared.utils.health import HealthStatus

from qc_api.generic.config import EntityConfig


def resolve_health_status(database: bool, table: bool, records: bool) -> HealthStatus:
    """
    healthy: every check passed; degraded: database and table reachable but
    metrics failed; unhealthy: anything else.
    """
    if database and table and records:
        return HealthStatus.HEALTHY
    if database and table:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


@dataclass
class HealthResult:
    status: HealthStatus
    checks: dict[str, bool]
    metrics: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": dict(self.checks),
            "metrics": dict(self.metrics),
            "timestamp": self.timestamp.isoformat(),
        }


class EntityHealthMonitor:
    """Health and counting queries for one entity table."""

    def __init__(self, config: EntityConfig, database: Database, logger=None):
        self.config = config
        self.database = database
        self.logger = logger or get_logger(__name__)

    def _counts_statement(self, extra_column: str = "") -> tuple[str, list[Any]]:
        sql = (
            "SELECT COUNT(*) AS total,"
            f" COALESCE(SUM(CASE WHEN {AuditFields.IS_ACTIVE} = :p1 THEN 1 ELSE 0 END), 0) AS active"
            f"{extra_column}"
            f" FROM {self.config.table_name}"
        )
        return sql, [True]

    @staticmethod
    def _counts(row: dict[str, Any] | None) -> dict[str, int]:
        total = int((row or {}).get("total") or 0)
        active = int((row or {}).get("active") or 0)
        return {"total": total, "active": active, "inactive": total - active}

    async def health(self) -> HealthResult:
        checks = {"database": False, "table": False, "records": False}
        metrics: dict[str, Any] = {"total": 0, "active": 0, "inactive": 0, "lastUpdated": None}
        entity = self.config.entity_name

        try:
            await self.database.ping()
            checks["database"] = True
        except Exception as e:
            self.logger.warning("Health check: database unreachable", entity=entity, error=str(e))

        if checks["database"]:
            try:
                checks["table"] = await self.database.table_exists(self.config.table_name)
                if not checks["table"]:
                    self.logger.warning("Health check: table missing", entity=entity, table=self.config.table_name)
            except Exception as e:
                self.logger.warning("Health check: table lookup failed", entity=entity, error=str(e))

        if checks["table"]:
            try:
                sql, values = self._counts_statement(f", MAX({AuditFields.UPDATED_AT}) AS last_updated")
                row = await self.database.fetch_one(sql, values)
                metrics.update(self._counts(row))
                metrics["lastUpdated"] = (row or {}).get("last_updated")
                checks["records"] = True
            except Exception as e:
                self.logger.warning("Health check: metrics query failed", entity=entity, error=str(e))

        status = resolve_health_status(**checks)
        self.logger.debug("Health check completed", entity=entity, status=status.value)
        return HealthResult(status=status, checks=checks, metrics=metrics)

    async def statistics(self) -> dict[str, int]:
        """
        {total, active, inactive} for the whole table.

        Raises:
            DatabaseError: If the counting query fails.
        """
        sql, values = self._counts_statement()
        with wrap_database_errors(self.config.display_name, "fetch statistics for"):
            row = await self.database.fetch_one(sql, values)
        return self._counts(row)
