"""
FastAPI dependencies shared by every entity router.

Usage:
    @router.get("")
    async def list_entities(options: QueryOptions = Depends(get_query_options)):
        ...
"""

from datetime import datetime

from fastapi import Header, Query

from shared.config.constants import ErrorMessages, Limits
from shared.utils.exceptions import UnauthorizedError

from qc_api.generic.options import QueryOptions

# Query parameters consumed by get_query_options; anything else on a
# composite /filter request is treated as a column predicate.
OPTION_PARAMS = frozenset({
    "page", "limit", "sortBy", "sortOrder", "search", "isActive",
    "createdAfter", "createdBefore", "updatedAfter", "updatedBefore",
})


def get_query_options(
    page: int = Query(default=Limits.DEFAULT_PAGE, description="1-indexed page number"),
    limit: int | None = Query(default=None, description="Items per page (clamped to the entity maximum)"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    search: str | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
    created_after: datetime | None = Query(default=None, alias="createdAfter"),
    created_before: datetime | None = Query(default=None, alias="createdBefore"),
    updated_after: datetime | None = Query(default=None, alias="updatedAfter"),
    updated_before: datetime | None = Query(default=None, alias="updatedBefore"),
) -> QueryOptions:
    """Read paging, sorting and filtering from the query string."""
    return QueryOptions(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        is_active=is_active,
        created_after=created_after,
        created_before=created_before,
        updated_after=updated_after,
        updated_before=updated_before,
    )


def get_actor_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> int:
    """
    Caller identity stamped into created_by/updated_by.

    Raises:
        UnauthorizedError: If the header is missing or not an integer.
    """
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError(ErrorMessages.ACTOR_REQUIRED)
    try:
        return int(x_user_id.strip())
    except ValueError:
        raise UnauthorizedError("X-User-Id header must be an integer", header=x_user_id) from None
