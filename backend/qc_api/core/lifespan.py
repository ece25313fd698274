"""
Startup and shutdown for the QC API.

Startup configures logging and refuses to run a production deployment with
an unsafe configuration. Shutdown closes the shared database pool.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.logging import qc_api_logger as logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    setup_logging()

    problems = settings.validate_production_settings()
    for problem in problems:
        logger.error("Configuration error", error=problem)
    if problems and settings.environment == "production":
        raise RuntimeError("Refusing to start with unsafe production settings: " + "; ".join(problems))

    entities = app.state.entities
    logger.info(
        "QC API started",
        env=settings.environment,
        port=settings.rest_api_port,
        dialect=app.state.database.dialect,
        entities=", ".join(sorted(entities)),
    )

    yield

    await app.state.database.dispose()
    logger.info("QC API stopped")
