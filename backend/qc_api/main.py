"""
QC API main application.
Entry point for the FastAPI server: wires every registered entity onto one
shared database pool.

Run:
    uvicorn qc_api.main:app --port 8000
"""

from typing import Iterable

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from shared.config.settings import Settings, get_settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.infrastructure.db import Database, get_database
from shared.utils.health import HealthStatus, aggregate_health_checks, health_check_with_timeout

from qc_api.core.cors import configure_cors
from qc_api.core.handlers import register_exception_handlers
from qc_api.core.lifespan import lifespan
from qc_api.entities import ENTITY_DEFINITIONS
from qc_api.generic import EntityDefinition, EntityStack, wire_entity


# =============================================================================
# Health Check
# =============================================================================

health_router = APIRouter(tags=["health"])


@health_router.get("/api/health")
def health_check(request: Request):
    """Basic liveness endpoint."""
    return {
        "status": HealthStatus.HEALTHY.value,
        "service": "qc-api",
        "environment": request.app.state.settings.environment,
    }


def _entity_check(stack: EntityStack, timeout: float):
    @health_check_with_timeout(timeout=timeout, component=f"entity:{stack.config.entity_name}")
    async def check_entity():
        health = await stack.repository.health()
        return {"status": health.status.value, "checks": health.checks}

    return check_entity


@health_router.get("/api/health/detailed")
async def detailed_health_check(request: Request):
    """
    Database connectivity plus the health of every entity table.
    Returns 503 when nothing is healthy.
    """
    settings: Settings = request.app.state.settings
    database: Database = request.app.state.database
    timeout = settings.health_check_timeout

    @health_check_with_timeout(timeout=timeout, component="database")
    async def check_database():
        await database.ping()
        return {"dialect": database.dialect}

    checks = [check_database()]
    checks.extend(_entity_check(stack, timeout)() for stack in request.app.state.entities.values())

    result = await aggregate_health_checks(checks)
    result["service"] = "qc-api"
    result["environment"] = settings.environment

    if result["status"] == HealthStatus.UNHEALTHY.value:
        return JSONResponse(content=result, status_code=503)
    return result


# =============================================================================
# Application factory
# =============================================================================


def create_app(
    database: Database | None = None,
    settings: Settings | None = None,
    definitions: Iterable[EntityDefinition] = ENTITY_DEFINITIONS,
) -> FastAPI:
    settings = settings or get_settings()
    database = database or get_database()

    app = FastAPI(
        title="QC Records API",
        description="Manufacturing quality-control records backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.entities = {}

    configure_cors(app, settings)
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    for definition in definitions:
        stack = wire_entity(definition, database)
        app.state.entities[definition.config.entity_name] = stack
        app.include_router(stack.router, prefix=settings.api_prefix)

    return app


app = create_app()
