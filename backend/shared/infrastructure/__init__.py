"""
Infrastructure module: Database access and request correlation.

Provides:
- Async database wrapper and engine factory (db.py)
- Correlation ID middleware and log filter (correlation.py)
"""

from shared.infrastructure.db import (
    Database,
    bind_values,
    create_database,
    get_database,
)
from shared.infrastructure.correlation import (
    CorrelationIdMiddleware,
    get_request_id,
)

__all__ = [
    # db
    "Database",
    "bind_values",
    "create_database",
    "get_database",
    # correlation
    "CorrelationIdMiddleware",
    "get_request_id",
]
