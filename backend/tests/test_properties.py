"""
Property-based Testing with Hypothesis.

Statement construction properties that must hold for any request input.
"""

import re

import pytest
from hypothesis import given, settings, strategies as st

from shared.infrastructure.db import bind_values
from shared.utils.validators import escape_like_pattern

from qc_api.entities import CUSTOMER, PART
from qc_api.generic import QueryOptions
from qc_api.generic.pagination import Pagination
from qc_api.generic.query_builder import QueryBuilder

filter_columns = st.sampled_from(["customer", "tab", "product_type", "versions"])
short_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=20)


def unescape_like(pattern: str) -> str:
    return re.sub(r"\\(.)", r"\1", pattern)


class TestQueryBuilderProperties:
    """Property-based tests for parameterized statements."""

    @given(
        search=st.one_of(st.none(), short_text),
        is_active=st.one_of(st.none(), st.booleans()),
        filters=st.dictionaries(filter_columns, st.one_of(st.none(), short_text), max_size=4),
        page=st.integers(min_value=-5, max_value=1000),
        limit=st.one_of(st.none(), st.integers(min_value=-100, max_value=10_000)),
    )
    @settings(max_examples=100)
    def test_placeholders_match_values(self, search, is_active, filters, page, limit):
        """Property: every statement uses exactly :p1..:pN for its N values."""
        options = QueryOptions(search=search, is_active=is_active, filters=filters, page=page, limit=limit)
        built = QueryBuilder(PART.config).build(options)

        for sql, values in (built.count_statement(), built.data_statement()):
            numbers = sorted({int(n) for n in re.findall(r":p(\d+)", sql)})
            assert numbers == list(range(1, len(values) + 1))
            bind_values(sql, values)

    @given(limit=st.one_of(st.none(), st.integers(min_value=-10_000, max_value=10_000)))
    def test_limit_always_within_bounds(self, limit):
        """Property: 1 <= effective limit <= max_limit."""
        effective = QueryBuilder(CUSTOMER.config).effective_limit(limit)
        assert 1 <= effective <= CUSTOMER.config.max_limit

    @given(sort_by=st.text(max_size=30))
    def test_sort_column_always_allowed(self, sort_by):
        """Property: the ORDER BY column is always from the allow-list."""
        column, _ = QueryBuilder(CUSTOMER.config).resolve_sort(sort_by)
        assert column in CUSTOMER.config.sortable_fields

    @given(term=short_text)
    def test_request_text_never_in_sql(self, term):
        """Property: search text only ever travels as a bound value."""
        built = QueryBuilder(CUSTOMER.config).build(QueryOptions(search="~" + term))
        sql, values = built.data_statement()
        assert "~" not in sql
        assert all(value == values[0] for value in values[:2])


class TestEscapingProperties:

    @given(value=st.text(max_size=50))
    def test_escape_round_trips(self, value):
        """Property: unescaping the escaped pattern gives back the input."""
        assert unescape_like(escape_like_pattern(value)) == value

    @given(value=st.text(max_size=50))
    def test_no_bare_wildcards(self, value):
        """Property: every % and _ in the escaped text is preceded by a backslash."""
        escaped = escape_like_pattern(value)
        stripped = re.sub(r"\\.", "", escaped)
        assert "%" not in stripped
        assert "_" not in stripped


class TestPaginationProperties:

    @given(
        total=st.integers(min_value=0, max_value=100_000),
        limit=st.integers(min_value=1, max_value=200),
    )
    def test_pages_cover_total(self, total, limit):
        """Property: totalPages * limit covers total with less than one page to spare."""
        meta = Pagination(page=1, limit=limit).to_dict(total=total)
        pages = meta["totalPages"]
        assert pages * limit >= total
        assert (pages - 1) * limit < total or total == 0

    @pytest.mark.parametrize("total,limit,pages", [(47, 20, 3), (40, 20, 2), (1, 20, 1), (0, 20, 0)])
    def test_known_page_counts(self, total, limit, pages):
        assert Pagination(limit=limit).to_dict(total=total)["totalPages"] == pages
