"""
Entity repositories, one per identity strategy.

Provides:
- EntityRepository: shared listing, search, mutation and health operations
- CodeEntityRepository: caller-supplied string codes
- SerialEntityRepository: database-assigned integer ids
- CompositeEntityRepository: multi-column keys, plus filter() and summary()
- build_repository: pick the repository for an EntityConfig's key kind
"""

from shared.config.constants import KeyKind
from shared.infrastructure.db import Database

from qc_api.generic.config import EntityConfig
from .base import EntityRepository
from .code import CodeEntityRepository
from .serial import SerialEntityRepository
from .composite import CompositeEntityRepository

REPOSITORY_BY_KIND: dict[KeyKind, type[EntityRepository]] = {
    KeyKind.CODE: CodeEntityRepository,
    KeyKind.SERIAL: SerialEntityRepository,
    KeyKind.COMPOSITE: CompositeEntityRepository,
}


def build_repository(config: EntityConfig, database: Database, logger=None) -> EntityRepository:
    return REPOSITORY_BY_KIND[config.key_kind](config, database, logger=logger)


__all__ = [
    "EntityRepository",
    "CodeEntityRepository",
    "SerialEntityRepository",
    "CompositeEntityRepository",
    "REPOSITORY_BY_KIND",
    "build_repository",
]
