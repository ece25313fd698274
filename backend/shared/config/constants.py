"""
Centralized constants for the QC records backend.
Avoids magic strings and repeated limits across the generic entity layers.

Usage:
    from shared.config.constants import AuditFields, Limits, ErrorMessages

    if field in AuditFields.ALL:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Audit Columns
# =============================================================================


class AuditFields:
    """Columns every entity table carries and the server stamps."""

    IS_ACTIVE: Final[str] = "is_active"
    CREATED_BY: Final[str] = "created_by"
    UPDATED_BY: Final[str] = "updated_by"
    CREATED_AT: Final[str] = "created_at"
    UPDATED_AT: Final[str] = "updated_at"

    ALL: Final[tuple[str, ...]] = (IS_ACTIVE, CREATED_BY, UPDATED_BY, CREATED_AT, UPDATED_AT)
    # Actor ids; query-string values for these are converted to int
    INTEGER: Final[tuple[str, ...]] = (CREATED_BY, UPDATED_BY)
    SORTABLE: Final[tuple[str, ...]] = (IS_ACTIVE, CREATED_AT, UPDATED_AT)


# =============================================================================
# Operations
# =============================================================================


class Operation(str, Enum):
    """Payload validation mode."""

    CREATE = "create"
    UPDATE = "update"


class KeyKind(str, Enum):
    """Primary key identity strategy."""

    CODE = "code"
    SERIAL = "serial"
    COMPOSITE = "composite"


class DeleteMode(str, Enum):
    """How delete() removes a record."""

    HARD = "hard"  # DELETE the row
    SOFT = "soft"  # is_active = false


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_STRING_LENGTH: Final[int] = 500
    MAX_KEY_LENGTH: Final[int] = 255
    MAX_FILTER_VALUE_LENGTH: Final[int] = 100
    MAX_SEARCH_TERM_LENGTH: Final[int] = 255
    DEFAULT_CODE_LENGTH: Final[int] = 10

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    DEFAULT_PAGE: Final[int] = 1


# =============================================================================
# Error Messages
# =============================================================================


class ErrorMessages:
    """Standardized error messages."""

    ENTITY_NOT_FOUND: Final[str] = "{entity} not found"
    ENTITY_EXISTS: Final[str] = "{entity} with {field} '{key}' already exists"
    OPERATION_FAILED: Final[str] = "Failed to {operation} {entity}"
    MISSING_KEY_FIELD: Final[str] = "Missing required primary key field: {field}"
    INVALID_CODE: Final[str] = "Invalid code provided"
    INVALID_ID: Final[str] = "Invalid id provided"
    INVALID_PAYLOAD: Final[str] = "Data must be an object"
    REQUIRED_FIELD: Final[str] = "{field} is required"
    UNKNOWN_FIELD: Final[str] = "{field} is not a recognized field"
    FIELD_TOO_LONG: Final[str] = "{field} must not exceed {limit} characters"
    IS_ACTIVE_BOOLEAN: Final[str] = "is_active must be a boolean"
    INVALID_CODE_FORMAT: Final[str] = "{field} may only contain letters, digits, '-' and '_'"
    SEARCH_TERM_REQUIRED: Final[str] = "{term} is required"
    SEARCH_TERM_TOO_LONG: Final[str] = "{term} must not exceed {limit} characters"
    ACTOR_REQUIRED: Final[str] = "X-User-Id header is required"
