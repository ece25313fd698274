"""
Tests for pagination metadata.
"""

import pytest

from qc_api.generic.pagination import PagedResult, Pagination


class TestPagination:

    def test_forty_seven_rows_twenty_per_page(self):
        first = Pagination(page=1, limit=20).to_dict(total=47)
        assert first["totalPages"] == 3
        assert first["hasNextPage"] is True
        assert first["hasPreviousPage"] is False

        last = Pagination(page=3, limit=20).to_dict(total=47)
        assert last["totalPages"] == 3
        assert last["hasNextPage"] is False
        assert last["hasPreviousPage"] is True

    def test_empty_result(self):
        meta = Pagination(page=1, limit=20).to_dict(total=0)
        assert meta == {
            "page": 1,
            "limit": 20,
            "total": 0,
            "totalPages": 0,
            "hasNextPage": False,
            "hasPreviousPage": False,
        }

    def test_page_past_end(self):
        meta = Pagination(page=5, limit=20).to_dict(total=47)
        assert meta["hasNextPage"] is False
        assert meta["hasPreviousPage"] is True

    @pytest.mark.parametrize("limit,expected", [(0, 1), (-3, 1), (250, 200), (75, 75)])
    def test_limit_clamped(self, limit, expected):
        assert Pagination(limit=limit).limit == expected

    def test_offset(self):
        assert Pagination(page=4, limit=25).offset == 75

    def test_paged_result_total(self):
        result = PagedResult(rows=[], pagination=Pagination().to_dict(total=12))
        assert result.total == 12
