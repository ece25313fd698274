"""
Health status vocabulary and component checks.

Entity monitors and the application's detailed health endpoint share the
same three statuses. Component checks are wrapped so that a hung or failing
dependency is reported, never raised.

Usage:
    @health_check_with_timeout(timeout=3.0, component="database")
    async def check_database():
        await database.ping()
        return {"dialect": database.dialect}

    report = await aggregate_health_checks([check_database()])
"""

from __future__ import annotations

import asyncio
import functools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Coroutine

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Outcome of one component check."""

    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status.value, "component": self.component}
        if self.latency_ms is not None:
            body["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            body["error"] = self.error
        if self.details:
            body["details"] = self.details
        return body


def health_check_with_timeout(timeout: float = 5.0, component: str | None = None):
    """
    Wrap an async check so it always yields a HealthCheckResult.

    The check may return a dict of details. A ``status`` key in that dict is
    reported instead of ``healthy``, which is how entity checks surface
    ``degraded``. Exceptions and timeouts become ``unhealthy`` with the
    error text; nothing is raised.
    """
    def decorator(
        func: Callable[..., Coroutine[Any, Any, dict[str, Any] | None]]
    ) -> Callable[..., Coroutine[Any, Any, HealthCheckResult]]:
        name = component or func.__name__.removeprefix("check_")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> HealthCheckResult:
            started = time.perf_counter()

            def elapsed() -> float:
                return (time.perf_counter() - started) * 1000

            try:
                details = await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Health check timed out", component=name, timeout=timeout)
                return HealthCheckResult(HealthStatus.UNHEALTHY, name, elapsed(), error=f"timeout after {timeout}s")
            except Exception as e:
                logger.warning("Health check failed", component=name, error=str(e))
                return HealthCheckResult(HealthStatus.UNHEALTHY, name, elapsed(), error=str(e))

            details = dict(details or {})
            status = HealthStatus(details.pop("status", HealthStatus.HEALTHY))
            return HealthCheckResult(status, name, elapsed(), details=details)

        return wrapper
    return decorator


def combine_statuses(statuses: list[HealthStatus]) -> HealthStatus:
    """
    Fold component statuses into one.

    All healthy -> healthy; nothing healthy -> unhealthy; anything in
    between -> degraded. An empty list counts as healthy.
    """
    if all(s == HealthStatus.HEALTHY for s in statuses):
        return HealthStatus.HEALTHY
    if all(s == HealthStatus.UNHEALTHY for s in statuses):
        return HealthStatus.UNHEALTHY
    return HealthStatus.DEGRADED


async def aggregate_health_checks(
    checks: list[Coroutine[Any, Any, HealthCheckResult]],
) -> dict[str, Any]:
    """Await every check together; report ``{"status", "components"}``."""
    outcomes = await asyncio.gather(*checks, return_exceptions=True)

    report: dict[str, dict] = {}
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, HealthCheckResult):
            report[outcome.component] = outcome.to_dict()
        else:
            # A check that escaped its wrapper has no component name
            report[f"unknown_{index}"] = {"status": HealthStatus.UNHEALTHY.value, "error": str(outcome)}

    overall = combine_statuses([HealthStatus(body["status"]) for body in report.values()])
    return {"status": overall.value, "components": report}
