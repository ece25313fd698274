"""
Base repository for configuration-driven entity tables.

Subclasses supply the identity strategy (how a key is checked and turned
into predicates); everything else (listing, search, mutations, status
toggle, health) is shared. Every public call either returns or raises:
framework errors pass through unchanged, anything else is re-raised as
DatabaseError("Failed to <op> <entity>: <cause>"). Nothing is retried.

Usage:
    repo = CodeEntityRepository(config, database)
    page = await repo.list(QueryOptions(page=2, limit=20))
    row = await repo.change_status("C0001", actor_id=7)
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Mapping

from shared.config.constants import AuditFields, DeleteMode
from shared.config.logging import get_logger
from shared.infrastructure.db import Database
from shared.utils.exceptions import NotFoundError, ValidationError, wrap_database_errors
from shared.utils.validators import contains_pattern

from qc_api.generic.config import EntityConfig
from qc_api.generic.health import EntityHealthMonitor, HealthResult
from qc_api.generic.options import QueryOptions
from qc_api.generic.pagination import PagedResult
from qc_api.generic.query_builder import BuiltQuery, QueryBuilder, WhereClause

CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"


class EntityRepository(ABC):
    """
    Data access for one entity table.

    Args:
        config: Entity configuration shared with the other layers.
        database: Pooled statement executor.
        logger: Optional logger (defaults to this module's).
    """

    def __init__(self, config: EntityConfig, database: Database, logger=None):
        self.config = config
        self.database = database
        self.logger = logger or get_logger(__name__)
        self.query_builder = QueryBuilder(config, logger=self.logger)
        self.monitor = EntityHealthMonitor(config, database, logger=self.logger)

    @property
    def table(self) -> str:
        return self.config.table_name

    def _guard(self, operation: str):
        return wrap_database_errors(self.config.display_name, operation)

    # =========================================================================
    # Identity strategy
    # =========================================================================

    @abstractmethod
    def normalize_key(self, key: Any) -> dict[str, Any]:
        """
        Check a key and return it as {column: value}.

        Raises:
            ValidationError: If the key is malformed. Raised before any
                statement is issued.
        """

    def uniqueness_key(self, data: Mapping[str, Any]) -> Any | None:
        """Key to check for duplicates before create, or None to skip the check."""
        return None

    def key_label(self, key: Mapping[str, Any]) -> str:
        return "/".join(str(key[name]) for name in self.config.key_fields)

    def add_key_predicates(self, clause: WhereClause, key: Mapping[str, Any]) -> WhereClause:
        for name in self.config.key_fields:
            clause.add(f"{name} = {{}}", key[name])
        return clause

    def key_clause(self, key: Any) -> WhereClause:
        return self.add_key_predicates(WhereClause(), self.normalize_key(key))

    def exists_clause(self, key: Any) -> WhereClause:
        return self.key_clause(key)

    def name_clause(self, name: str) -> WhereClause:
        """Case-insensitive substring match on the name column."""
        return WhereClause().add(
            f"LOWER(CAST({self.config.name_field} AS TEXT)) LIKE LOWER({{}}) ESCAPE '\\'",
            contains_pattern(name),
        )

    def prepare_insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Columns and values for INSERT, limited to insertable fields."""
        values = {name: data[name] for name in self.config.insertable_fields if name in data}
        values.setdefault(AuditFields.IS_ACTIVE, True)
        return values

    # =========================================================================
    # Reads
    # =========================================================================

    async def _run_paged(self, built: BuiltQuery, operation: str) -> PagedResult:
        count_sql, count_values = built.count_statement()
        data_sql, data_values = built.data_statement()
        with self._guard(operation):
            # Separate pooled connections, no shared transaction
            total, rows = await asyncio.gather(
                self.database.scalar(count_sql, count_values),
                self.database.fetch_all(data_sql, data_values),
            )
        return PagedResult(rows=rows, pagination=built.pagination.to_dict(total=int(total or 0)))

    async def get_by_key(self, key: Any) -> dict[str, Any] | None:
        clause = self.key_clause(key)
        with self._guard("fetch"):
            return await self.database.fetch_one(f"SELECT * FROM {self.table}{clause.sql}", clause.values)

    async def list(self, options: QueryOptions | None = None) -> PagedResult:
        built = self.query_builder.build(options)
        return await self._run_paged(built, "list")

    async def search(self, pattern: str, options: QueryOptions | None = None) -> PagedResult:
        options = (options or QueryOptions()).with_changes(search=pattern)
        built = self.query_builder.build(options)
        return await self._run_paged(built, "search")

    async def filter_status(self, is_active: bool, options: QueryOptions | None = None) -> PagedResult:
        options = (options or QueryOptions()).with_changes(is_active=bool(is_active))
        built = self.query_builder.build(options)
        return await self._run_paged(built, "filter")

    async def get_by_name(self, name: str, options: QueryOptions | None = None) -> PagedResult:
        if not self.config.name_field:
            raise ValidationError(f"{self.config.display_name} does not support lookup by name")
        built = self.query_builder.build(options, where=self.name_clause(name))
        return await self._run_paged(built, "search")

    async def count(self, options: QueryOptions | None = None) -> int:
        sql, values = self.query_builder.build(options).count_statement()
        with self._guard("count"):
            return int(await self.database.scalar(sql, values) or 0)

    async def exists(self, key: Any) -> bool:
        clause = self.exists_clause(key)
        with self._guard("check"):
            row = await self.database.fetch_one(f"SELECT 1 AS found FROM {self.table}{clause.sql} LIMIT 1", clause.values)
        return row is not None

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create(self, data: Mapping[str, Any], actor_id: int | None) -> dict[str, Any]:
        """Insert a row stamped with the actor and return it as stored."""
        values = self.prepare_insert(data)
        params = WhereClause()
        columns = list(values)
        placeholders = [params.placeholder(values[name]) for name in columns]

        columns += [AuditFields.CREATED_BY, AuditFields.UPDATED_BY]
        placeholders += [params.placeholder(actor_id), params.placeholder(actor_id)]
        columns += [AuditFields.CREATED_AT, AuditFields.UPDATED_AT]
        placeholders += [CURRENT_TIMESTAMP, CURRENT_TIMESTAMP]

        sql = (
            f"INSERT INTO {self.table} ({', '.join(columns)})"
            f" VALUES ({', '.join(placeholders)}) RETURNING *"
        )
        with self._guard("create"):
            row = await self.database.execute_returning(sql, params.values)

        self.logger.info("Entity created", entity=self.config.entity_name, actor_id=actor_id)
        return row

    async def update(self, key: Any, data: Mapping[str, Any], actor_id: int | None) -> dict[str, Any]:
        """
        Update writable columns and return the row as stored.

        Raises:
            NotFoundError: If no row matches the key.
        """
        normalized = self.normalize_key(key)
        params = WhereClause()
        assignments = [
            f"{name} = {params.placeholder(data[name])}"
            for name in self.config.updatable_fields
            if name in data
        ]
        assignments.append(f"{AuditFields.UPDATED_BY} = {params.placeholder(actor_id)}")
        assignments.append(f"{AuditFields.UPDATED_AT} = {CURRENT_TIMESTAMP}")
        self.add_key_predicates(params, normalized)
        where = " WHERE " + " AND ".join(params.fragments)

        sql = f"UPDATE {self.table} SET {', '.join(assignments)}{where} RETURNING *"
        with self._guard("update"):
            row = await self.database.execute_returning(sql, params.values)

        if row is None:
            raise NotFoundError(self.config.display_name, self.key_label(normalized))
        self.logger.info("Entity updated", entity=self.config.entity_name, key=self.key_label(normalized))
        return row

    async def delete(self, key: Any, actor_id: int | None = None) -> bool:
        """Hard or soft delete according to the entity's delete mode. False when nothing matched."""
        normalized = self.normalize_key(key)
        params = WhereClause()

        if self.config.delete_mode == DeleteMode.SOFT:
            assignments = [f"{AuditFields.IS_ACTIVE} = {params.placeholder(False)}"]
            if actor_id is not None:
                assignments.append(f"{AuditFields.UPDATED_BY} = {params.placeholder(actor_id)}")
            assignments.append(f"{AuditFields.UPDATED_AT} = {CURRENT_TIMESTAMP}")
            self.add_key_predicates(params, normalized)
            # Only active rows; a repeated delete matches nothing
            params.add(f"{AuditFields.IS_ACTIVE} = {{}}", True)
            sql = f"UPDATE {self.table} SET {', '.join(assignments)} WHERE {' AND '.join(params.fragments)}"
        else:
            self.add_key_predicates(params, normalized)
            sql = f"DELETE FROM {self.table}{params.sql}"

        with self._guard("delete"):
            affected = await self.database.execute(sql, params.values)

        deleted = affected > 0
        if deleted:
            self.logger.info(
                "Entity deleted",
                entity=self.config.entity_name,
                key=self.key_label(normalized),
                mode=self.config.delete_mode.value,
            )
        return deleted

    async def change_status(self, key: Any, actor_id: int | None) -> dict[str, Any] | None:
        """
        Flip is_active in a single statement and return the row, or None.

        The new value is computed by the database, so concurrent toggles
        never read a stale state.
        """
        normalized = self.normalize_key(key)
        params = WhereClause()
        updated_by = params.placeholder(actor_id)
        self.add_key_predicates(params, normalized)
        sql = (
            f"UPDATE {self.table}"
            f" SET {AuditFields.IS_ACTIVE} = NOT {AuditFields.IS_ACTIVE},"
            f" {AuditFields.UPDATED_BY} = {updated_by},"
            f" {AuditFields.UPDATED_AT} = {CURRENT_TIMESTAMP}"
            f" WHERE {' AND '.join(params.fragments)} RETURNING *"
        )
        with self._guard("change status of"):
            row = await self.database.execute_returning(sql, params.values)

        if row is not None:
            self.logger.info(
                "Entity status changed",
                entity=self.config.entity_name,
                key=self.key_label(normalized),
                is_active=bool(row.get(AuditFields.IS_ACTIVE)),
            )
        return row

    # =========================================================================
    # Health & statistics
    # =========================================================================

    async def health(self) -> HealthResult:
        return await self.monitor.health()

    async def statistics(self) -> dict[str, int]:
        return await self.monitor.statistics()
