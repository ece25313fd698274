"""
Repository for entities identified by several columns together (customer
sites, parts and other "special" tables).

A key is a mapping with every key column present; a missing or blank
component raises MissingKeyFieldError before any statement runs. Nothing
is defaulted.
"""

from typing import Any, Mapping

from shared.config.constants import AuditFields, ErrorMessages
from shared.utils.exceptions import MissingKeyFieldError, ValidationError

from qc_api.generic.options import QueryOptions
from qc_api.generic.pagination import PagedResult
from qc_api.generic.repositories.base import EntityRepository


class CompositeEntityRepository(EntityRepository):

    def normalize_key(self, key: Any) -> dict[str, Any]:
        if not isinstance(key, Mapping):
            raise MissingKeyFieldError(self.config.key_fields[0], entity=self.config.entity_name)

        normalized = {}
        for name in self.config.key_fields:
            value = key.get(name)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                raise MissingKeyFieldError(name, entity=self.config.entity_name)
            limit = self.config.max_length_for(name)
            if isinstance(value, str) and len(value) > limit:
                raise ValidationError(
                    ErrorMessages.FIELD_TOO_LONG.format(field=name, limit=limit),
                    entity=self.config.entity_name,
                )
            normalized[name] = value
        return normalized

    def uniqueness_key(self, data: Mapping[str, Any]) -> Any | None:
        if all(data.get(name) not in (None, "") for name in self.config.key_fields):
            return {name: data[name] for name in self.config.key_fields}
        return None

    # =========================================================================
    # Composite-only reads
    # =========================================================================

    async def filter(self, predicates: Mapping[str, Any], options: QueryOptions | None = None) -> PagedResult:
        """
        Column-equality filtering through the same builder contract as list().

        Raises:
            ValidationError: Unknown columns or over-long values.
        """
        options = options or QueryOptions()
        merged = {**(options.filters or {}), **dict(predicates)}
        built = self.query_builder.build(options.with_changes(filters=merged))
        return await self._run_paged(built, "filter")

    def groupable_fields(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys((*self.config.key_fields, *self.config.writable_fields)))

    async def summary(self, group_by: str | None = None) -> dict[str, Any]:
        """
        Total/active/inactive counts, optionally broken down by one column.

        Raises:
            ValidationError: If group_by is not a key or writable column.
        """
        totals = await self.statistics()
        if not group_by:
            return {**totals, "groups": []}

        if group_by not in self.groupable_fields():
            raise ValidationError(
                f"Cannot group by {group_by}; allowed: {', '.join(self.groupable_fields())}",
                entity=self.config.entity_name,
            )

        sql = (
            f"SELECT {group_by} AS group_value, COUNT(*) AS total,"
            f" COALESCE(SUM(CASE WHEN {AuditFields.IS_ACTIVE} = :p1 THEN 1 ELSE 0 END), 0) AS active"
            f" FROM {self.table} GROUP BY {group_by} ORDER BY {group_by}"
        )
        with self._guard("summarize"):
            rows = await self.database.fetch_all(sql, [True])

        groups = []
        for row in rows:
            total = int(row["total"] or 0)
            active = int(row["active"] or 0)
            groups.append({
                group_by: row["group_value"],
                "total": total,
                "active": active,
                "inactive": total - active,
            })
        return {**totals, "groupBy": group_by, "groups": groups}
