"""
Query options accepted by list, search and filter operations.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from shared.config.constants import Limits


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value: "str | SortOrder | None") -> "SortOrder | None":
        """Case-insensitive parse; anything unrecognised is None."""
        if value is None:
            return None
        if isinstance(value, SortOrder):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


@dataclass
class QueryOptions:
    """
    Paging, sorting and filtering for one request.

    Values are taken as given; the query builder clamps ``limit`` and
    ``page`` and checks ``sort_by`` against the entity's allow-list.
    """

    page: int = Limits.DEFAULT_PAGE
    limit: int | None = None
    sort_by: str | None = None
    sort_order: SortOrder | str | None = None
    search: str | None = None
    is_active: bool | None = None
    filters: dict[str, Any] = field(default_factory=dict)
    created_after: datetime | None = None
    created_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None

    def with_changes(self, **changes: Any) -> "QueryOptions":
        return replace(self, **changes)
