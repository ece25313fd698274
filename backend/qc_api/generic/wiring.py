"""
Assembles the per-entity stack from a declaration.

    definition (config + extra rules)
        -> repository (by key kind) -> validation engine -> service -> router
"""

from dataclasses import dataclass

from fastapi import APIRouter

from shared.config.constants import KeyKind
from shared.config.logging import get_logger
from shared.infrastructure.db import Database

from qc_api.generic.config import EntityConfig
from qc_api.generic.repositories import EntityRepository, build_repository
from qc_api.generic.router import build_entity_router
from qc_api.generic.service import CompositeEntityService, EntityService
from qc_api.generic.validation import ExtraRules, ValidationEngine


@dataclass(frozen=True)
class EntityDefinition:
    """What an entity module declares: its config and optional extra rules."""

    config: EntityConfig
    extra_rules: ExtraRules | None = None


@dataclass
class EntityStack:
    config: EntityConfig
    repository: EntityRepository
    validator: ValidationEngine
    service: EntityService
    router: APIRouter


def wire_entity(definition: EntityDefinition, database: Database, logger=None) -> EntityStack:
    config = definition.config
    logger = logger or get_logger(f"qc_api.entities.{config.entity_name}")

    repository = build_repository(config, database, logger=logger)
    validator = ValidationEngine(config, extra_rules=definition.extra_rules, logger=logger)
    service_cls = CompositeEntityService if config.key_kind == KeyKind.COMPOSITE else EntityService
    service = service_cls(config, repository, validator, logger=logger)

    return EntityStack(
        config=config,
        repository=repository,
        validator=validator,
        service=service,
        router=build_entity_router(service),
    )
