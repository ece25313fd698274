"""
Parameterized query construction for entity listings.

Every value reaches the database as a bound parameter (``:p1 .. :pN``).
Identifiers come only from the EntityConfig: sort columns are checked
against its allow-list and filter keys against its column set, so nothing
taken from a request is ever spliced into SQL text.

Usage:
    builder = QueryBuilder(config)
    built = builder.build(QueryOptions(search="50%", limit=500))
    count_sql, count_values = built.count_statement()
    data_sql, data_values = built.data_statement()
"""

from dataclasses import dataclass
from typing import Any, Mapping

from shared.config.constants import AuditFields, Limits
from shared.config.logging import get_logger
from shared.utils.exceptions import ValidationError
from shared.utils.validators import contains_pattern

from qc_api.generic.config import EntityConfig
from qc_api.generic.options import QueryOptions, SortOrder
from qc_api.generic.pagination import Pagination


class WhereClause:
    """
    Accumulates predicate fragments and their bound values together.

    ``add`` takes a template with one ``{}`` slot per value; each slot is
    replaced by the next placeholder, so fragments and values stay aligned.
    """

    def __init__(self):
        self.fragments: list[str] = []
        self.values: list[Any] = []

    def placeholder(self, value: Any) -> str:
        self.values.append(value)
        return f":p{len(self.values)}"

    def add(self, template: str, *values: Any) -> "WhereClause":
        placeholders = [self.placeholder(value) for value in values]
        self.fragments.append(template.format(*placeholders))
        return self

    def __bool__(self) -> bool:
        return bool(self.fragments)

    @property
    def sql(self) -> str:
        if not self.fragments:
            return ""
        return " WHERE " + " AND ".join(self.fragments)


@dataclass(frozen=True)
class BuiltQuery:
    """
    The shared result of one build: the count and data statements are both
    derived from the same WHERE clause and values.
    """

    table: str
    where: str
    values: tuple[Any, ...]
    order_by: str
    pagination: Pagination

    def count_statement(self) -> tuple[str, list[Any]]:
        return f"SELECT COUNT(*) AS total FROM {self.table}{self.where}", list(self.values)

    def data_statement(self) -> tuple[str, list[Any]]:
        n = len(self.values)
        sql = (
            f"SELECT * FROM {self.table}{self.where}"
            f" ORDER BY {self.order_by}"
            f" LIMIT :p{n + 1} OFFSET :p{n + 2}"
        )
        return sql, [*self.values, self.pagination.limit, self.pagination.offset]


class QueryBuilder:
    """Turns QueryOptions into validated, parameterized statements for one entity."""

    def __init__(self, config: EntityConfig, logger=None):
        self.config = config
        self.logger = logger or get_logger(__name__)

    # =========================================================================
    # Paging & sorting
    # =========================================================================

    def effective_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.default_limit
        return max(1, min(int(limit), self.config.max_limit))

    def pagination(self, options: QueryOptions) -> Pagination:
        return Pagination(
            page=options.page or Limits.DEFAULT_PAGE,
            limit=self.effective_limit(options.limit),
            max_limit=self.config.max_limit,
        )

    def resolve_sort(self, sort_by: str | None, sort_order: Any = None) -> tuple[str, SortOrder]:
        """
        Allow-listed sort column and direction.

        Unknown columns fall back to the configured default column; an
        unknown direction falls back to the configured default direction.
        """
        column = sort_by if sort_by in self.config.sortable_fields else self.config.default_sort_by
        if sort_by and column != sort_by:
            self.logger.debug(
                "Sort field not allowed, using default",
                entity=self.config.entity_name,
                requested=sort_by,
                used=column,
            )
        order = SortOrder.parse(sort_order) or SortOrder.parse(self.config.default_sort_order) or SortOrder.ASC
        return column, order

    def order_by(self, sort_by: str | None, sort_order: Any = None) -> str:
        column, order = self.resolve_sort(sort_by, sort_order)
        terms = [f"{column} {order.value}"]
        # Key columns break ties so pages are stable
        terms.extend(f"{key} ASC" for key in self.config.key_fields if key != column)
        return ", ".join(terms)

    # =========================================================================
    # Predicates
    # =========================================================================

    def search_fields(self) -> tuple[str, ...]:
        return self.config.searchable_fields or self.config.key_fields

    def add_search(self, clause: WhereClause, term: str) -> None:
        """OR-group of escaped, case-insensitive substring matches, one value per field."""
        fields = self.search_fields()
        pattern = contains_pattern(term)
        template = " OR ".join(
            f"LOWER(CAST({name} AS TEXT)) LIKE LOWER({{}}) ESCAPE '\\'" for name in fields
        )
        clause.add(f"({template})", *([pattern] * len(fields)))

    def add_equality_filters(self, clause: WhereClause, filters: Mapping[str, Any] | None) -> None:
        """
        Column equality predicates.

        ``None`` values are dropped. Unknown columns and string values longer
        than the filter ceiling are collected and raised together.

        Raises:
            ValidationError: If any filter is invalid.
        """
        if not filters:
            return
        errors = []
        accepted = []
        columns = set(self.config.columns)
        for name, value in filters.items():
            if value is None:
                continue
            if name not in columns:
                errors.append(f"Unknown filter field: {name}")
                continue
            if isinstance(value, str) and len(value) > Limits.MAX_FILTER_VALUE_LENGTH:
                errors.append(
                    f"Filter value for {name} must not exceed {Limits.MAX_FILTER_VALUE_LENGTH} characters"
                )
                continue
            accepted.append((name, value))
        if errors:
            raise ValidationError(errors, entity=self.config.entity_name)
        for name, value in accepted:
            clause.add(f"{name} = {{}}", value)

    def add_option_predicates(self, clause: WhereClause, options: QueryOptions) -> None:
        if options.search and options.search.strip():
            self.add_search(clause, options.search.strip())
        if options.is_active is not None:
            clause.add(f"{AuditFields.IS_ACTIVE} = {{}}", bool(options.is_active))
        self.add_equality_filters(clause, options.filters)

        ranges = (
            (options.created_after, AuditFields.CREATED_AT, ">="),
            (options.created_before, AuditFields.CREATED_AT, "<="),
            (options.updated_after, AuditFields.UPDATED_AT, ">="),
            (options.updated_before, AuditFields.UPDATED_AT, "<="),
        )
        for value, column, op in ranges:
            if value is not None:
                clause.add(f"{column} {op} {{}}", value)

    # =========================================================================
    # Build
    # =========================================================================

    def build(self, options: QueryOptions | None = None, where: WhereClause | None = None) -> BuiltQuery:
        """
        Build the count and data statements for one listing request.

        Args:
            options: Paging, sorting and filtering (defaults apply when None).
            where: Pre-seeded predicates (e.g. a name match) that the option
                predicates are ANDed onto.
        """
        options = options or QueryOptions()
        clause = where or WhereClause()
        self.add_option_predicates(clause, options)

        return BuiltQuery(
            table=self.config.table_name,
            where=clause.sql,
            values=tuple(clause.values),
            order_by=self.order_by(options.sort_by, options.sort_order),
            pagination=self.pagination(options),
        )
