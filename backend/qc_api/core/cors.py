"""
CORS configuration for the QC API.

Origins come from ALLOWED_ORIGINS (comma-separated); without it the local
dashboard dev servers are allowed. The X-User-Id actor header must be
allowed for browser clients to reach any mutating route.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import Settings
from shared.infrastructure.correlation import REQUEST_ID_HEADER

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

ENTITY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

REQUEST_HEADERS = ["Content-Type", "Accept", "X-User-Id", REQUEST_ID_HEADER]


def get_cors_origins(settings: Settings) -> list[str]:
    origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
    return [origin for origin in origins if origin] or DEV_ORIGINS


def configure_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings),
        allow_methods=ENTITY_METHODS,
        allow_headers=REQUEST_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        # Preflight results are not cached in development
        max_age=0 if settings.environment == "development" else 600,
    )
