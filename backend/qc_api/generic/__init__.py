"""
Generic entity framework.

An EntityConfig describes a table; wire_entity() turns it into a
repository, validation engine, envelope-returning service and FastAPI
router that all share it.

Modules:
- config.py: EntityConfig and the CodeKey / SerialKey / CompositeKey specs
- options.py: QueryOptions, SortOrder
- query_builder.py: parameterized WHERE / ORDER BY / LIMIT construction
- pagination.py: page metadata
- validation.py: payload validation with pluggable extra rules
- health.py: per-entity health and statistics
- repositories/: data access per identity strategy
- service.py: ServiceResult envelope and EntityService
- router.py, dependencies.py: HTTP surface
- wiring.py: EntityDefinition -> EntityStack
"""

from qc_api.generic.config import CodeKey, CompositeKey, EntityConfig, SerialKey
from qc_api.generic.options import QueryOptions, SortOrder
from qc_api.generic.service import CompositeEntityService, EntityService, ServiceResult
from qc_api.generic.wiring import EntityDefinition, EntityStack, wire_entity

__all__ = [
    "CodeKey",
    "CompositeKey",
    "EntityConfig",
    "SerialKey",
    "QueryOptions",
    "SortOrder",
    "CompositeEntityService",
    "EntityService",
    "ServiceResult",
    "EntityDefinition",
    "EntityStack",
    "wire_entity",
]
