"""
Page-based pagination for entity listings.

Usage:
    pagination = Pagination(page=2, limit=20, max_limit=config.max_limit)
    rows = await db.fetch_all(sql, [..., pagination.limit, pagination.offset])
    return PagedResult(rows=rows, pagination=pagination.to_dict(total=count))
"""

import math
from dataclasses import dataclass
from typing import Any

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        page: 1-indexed page number (values below 1 become 1)
        limit: Items per page (clamped to 1..max_limit)
        max_limit: Maximum allowed limit
    """

    page: int = Limits.DEFAULT_PAGE
    limit: int = Limits.DEFAULT_PAGE_SIZE
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.limit = min(max(1, int(self.limit)), self.max_limit)
        self.page = max(1, int(self.page))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self, total: int) -> dict[str, Any]:
        """
        Response metadata for one page.

        Args:
            total: Total number of matching rows

        Returns:
            {page, limit, total, totalPages, hasNextPage, hasPreviousPage}
        """
        total_pages = math.ceil(total / self.limit) if total > 0 else 0
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "totalPages": total_pages,
            "hasNextPage": self.page < total_pages,
            "hasPreviousPage": self.page > 1,
        }


# =============================================================================
# Paginated Result
# =============================================================================


@dataclass
class PagedResult:
    """Rows of one page plus the pagination metadata computed with them."""

    rows: list[dict[str, Any]]
    pagination: dict[str, Any]

    @property
    def total(self) -> int:
        return self.pagination["total"]
