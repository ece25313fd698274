"""
Tests for entity configuration and parameterized query construction.
"""

import re
from datetime import datetime, timezone

import pytest

from shared.config.constants import DeleteMode, KeyKind
from shared.infrastructure.db import bind_values
from shared.utils.exceptions import ValidationError

from qc_api.entities import CUSTOMER, CUSTOMER_SITE, DEFECT, PART
from qc_api.generic import CodeKey, CompositeKey, EntityConfig, QueryOptions, SerialKey, SortOrder
from qc_api.generic.query_builder import QueryBuilder, WhereClause


def placeholders(sql):
    return [int(n) for n in re.findall(r":p(\d+)", sql)]


class TestEntityConfig:
    """EntityConfig defaults and construction checks."""

    def test_code_entity_defaults(self):
        config = CUSTOMER.config
        assert config.key_kind == KeyKind.CODE
        assert config.key_fields == ("code",)
        assert config.delete_mode == DeleteMode.HARD
        assert config.default_sort_by == "code"
        assert config.default_sort_order == "ASC"
        assert "code" not in config.writable_fields

    def test_composite_entity_defaults(self):
        config = CUSTOMER_SITE.config
        assert config.key_kind == KeyKind.COMPOSITE
        assert config.key_fields == ("customers", "site")
        assert config.delete_mode == DeleteMode.SOFT
        assert config.default_sort_by == "created_at"
        assert config.default_sort_order == "DESC"

    def test_serial_key_not_insertable(self):
        config = DEFECT.config
        assert config.key_kind == KeyKind.SERIAL
        assert "id" not in config.insertable_fields
        assert "is_active" in config.insertable_fields

    def test_display_name_derived(self):
        config = EntityConfig(
            entity_name="sampling_reason",
            table_name="sampling_reasons",
            api_path="/sampling-reasons",
            primary_key=SerialKey(),
            required_fields=("name",),
        )
        assert config.display_name == "Sampling reason"

    def test_rejects_non_identifier_table(self):
        with pytest.raises(ValueError):
            EntityConfig(
                entity_name="bad",
                table_name="bad; DROP TABLE x",
                api_path="/bad",
                primary_key=CodeKey(),
            )

    def test_rejects_unknown_searchable_field(self):
        with pytest.raises(ValueError):
            EntityConfig(
                entity_name="bad",
                table_name="bad",
                api_path="/bad",
                primary_key=CodeKey(),
                searchable_fields=("missing",),
                writable_fields=("name",),
            )

    def test_rejects_default_limit_above_max(self):
        with pytest.raises(ValueError):
            EntityConfig(
                entity_name="bad",
                table_name="bad",
                api_path="/bad",
                primary_key=CodeKey(),
                default_limit=300,
                max_limit=100,
            )

    def test_composite_key_requires_fields(self):
        with pytest.raises(ValueError):
            CompositeKey(fields=())
        with pytest.raises(ValueError):
            CompositeKey(fields=("a", "a"))

    def test_max_length_lookup(self):
        config = CUSTOMER.config
        assert config.max_length_for("code") == 5
        assert config.max_length_for("name") == 100
        assert config.max_length_for("created_by") == 500


class TestWhereClause:
    """Placeholders are numbered in the order values are added."""

    def test_add_numbers_placeholders(self):
        clause = WhereClause()
        clause.add("a = {}", 1).add("(b = {} OR c = {})", 2, 3)
        assert clause.sql == " WHERE a = :p1 AND (b = :p2 OR c = :p3)"
        assert clause.values == [1, 2, 3]

    def test_empty_clause(self):
        clause = WhereClause()
        assert clause.sql == ""
        assert not clause


class TestSorting:
    """Sort columns come from the allow-list only."""

    def test_allowed_sort(self):
        builder = QueryBuilder(CUSTOMER.config)
        assert builder.order_by("name", "desc") == "name DESC, code ASC"

    def test_unknown_sort_falls_back(self):
        builder = QueryBuilder(CUSTOMER.config)
        column, order = builder.resolve_sort("name; DROP TABLE customers", "sideways")
        assert column == "code"
        assert order == SortOrder.ASC

    def test_composite_tie_breakers(self):
        builder = QueryBuilder(CUSTOMER_SITE.config)
        assert builder.order_by(None) == "created_at DESC, customers ASC, site ASC"

    def test_sort_order_parse(self):
        assert SortOrder.parse("desc") == SortOrder.DESC
        assert SortOrder.parse(" ASC ") == SortOrder.ASC
        assert SortOrder.parse("up") is None
        assert SortOrder.parse(None) is None


class TestLimits:
    """Limits are clamped to 1..max_limit."""

    @pytest.mark.parametrize("requested,expected", [
        (None, 20),
        (0, 1),
        (-5, 1),
        (50, 50),
        (500, 100),
    ])
    def test_effective_limit(self, requested, expected):
        builder = QueryBuilder(CUSTOMER.config)
        assert builder.effective_limit(requested) == expected

    def test_page_below_one(self):
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(page=0, limit=10))
        assert built.pagination.page == 1
        assert built.pagination.offset == 0


class TestBuild:
    """Count and data statements share one WHERE clause."""

    def test_defaults(self):
        built = QueryBuilder(CUSTOMER.config).build()
        count_sql, count_values = built.count_statement()
        data_sql, data_values = built.data_statement()

        assert count_sql == "SELECT COUNT(*) AS total FROM customers"
        assert count_values == []
        assert data_sql == "SELECT * FROM customers ORDER BY code ASC LIMIT :p1 OFFSET :p2"
        assert data_values == [20, 0]

    def test_search_one_value_per_field(self):
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(search="acme"))
        count_sql, count_values = built.count_statement()

        assert count_values == ["%acme%", "%acme%"]
        assert "LOWER(CAST(code AS TEXT)) LIKE LOWER(:p1)" in count_sql
        assert "LOWER(CAST(name AS TEXT)) LIKE LOWER(:p2)" in count_sql
        assert " OR " in count_sql

    def test_search_escapes_wildcards(self):
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(search="50%_x"))
        assert built.values[0] == "%50\\%\\_x%"

    def test_blank_search_ignored(self):
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(search="   "))
        assert built.where == ""

    def test_is_active_and_dates(self):
        after = datetime(2024, 1, 1, tzinfo=timezone.utc)
        options = QueryOptions(is_active=False, created_after=after, page=3, limit=10)
        built = QueryBuilder(DEFECT.config).build(options)
        data_sql, data_values = built.data_statement()

        assert "is_active = :p1" in data_sql
        assert "created_at >= :p2" in data_sql
        assert data_values == [False, after, 10, 20]

    def test_equality_filters(self):
        options = QueryOptions(filters={"customer": "C0001", "tab": None})
        built = QueryBuilder(PART.config).build(options)
        assert built.where == " WHERE customer = :p1"
        assert built.values == ("C0001",)

    def test_invalid_filters_reported_together(self):
        options = QueryOptions(filters={"nope": "x", "customer": "y" * 101})
        with pytest.raises(ValidationError) as exc_info:
            QueryBuilder(PART.config).build(options)
        assert len(exc_info.value.errors) == 2
        assert "Unknown filter field: nope" in exc_info.value.errors

    def test_preseeded_where_comes_first(self):
        where = WhereClause().add("LOWER(name) = LOWER({})", "acme")
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(search="a"), where=where)
        assert built.where.startswith(" WHERE LOWER(name) = LOWER(:p1) AND (")
        assert built.values == ("acme", "%a%", "%a%")

    def test_placeholders_align_with_values(self):
        options = QueryOptions(
            search="x",
            is_active=True,
            filters={"customer": "C1", "tab": "T"},
            updated_before=datetime(2025, 1, 1),
            limit=15,
            page=2,
        )
        built = QueryBuilder(PART.config).build(options)
        for sql, values in (built.count_statement(), built.data_statement()):
            assert sorted(set(placeholders(sql))) == list(range(1, len(values) + 1))
            assert set(bind_values(sql, values)) == {f"p{i}" for i in range(1, len(values) + 1)}


class TestBindValues:
    """bind_values refuses misaligned statements."""

    def test_mismatch_raises(self):
        with pytest.raises(ValueError):
            bind_values("SELECT * FROM t WHERE a = :p1 AND b = :p2", [1])

    def test_gap_raises(self):
        with pytest.raises(ValueError):
            bind_values("SELECT * FROM t WHERE a = :p1 AND b = :p3", [1, 2])

    def test_binds_in_order(self):
        assert bind_values("a = :p1 AND b = :p2", ["x", "y"]) == {"p1": "x", "p2": "y"}
