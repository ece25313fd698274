"""
HTTP errors raised by the QC backend.
Each one writes a log record when it is built and carries the status code
that the service envelope and the exception handlers report.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Customer", "C0001")
    raise ValidationError(["code is required", "name is required"])
    raise DatabaseError("Customer", "create", cause=exc)
"""

from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from fastapi import HTTPException, status

from shared.config.constants import ErrorMessages
from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """Root of the error hierarchy; the log level follows the severity."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    No row matches the key (404).

    Usage:
        raise NotFoundError("Customer", "C0001")
        raise NotFoundError("Customer site", {"customer_code": "C1", "site_code": "S1"})
    """

    def __init__(self, entity: str, entity_id: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorMessages.ENTITY_NOT_FOUND.format(entity=entity),
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class UnauthorizedError(AppException):
    """Caller identity missing or unreadable (401)."""

    def __init__(self, detail: str = ErrorMessages.ACTOR_REQUIRED, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Rejected input (400).

    Accepts a single message or a list of accumulated messages; the list is
    kept on ``errors`` and joined with ", " for the response detail.

    Usage:
        raise ValidationError("Invalid code provided")
        raise ValidationError(["code is required", "name is required"], entity="customer")
    """

    def __init__(self, detail: str | Iterable[str], **log_context: Any):
        if isinstance(detail, str):
            self.errors = [detail]
        else:
            self.errors = list(detail)

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=", ".join(self.errors),
            log_level="warning",
            **log_context,
        )


class MissingKeyFieldError(ValidationError):
    """A composite key lookup omitted one of its fields."""

    def __init__(self, field: str, **log_context: Any):
        self.field = field
        super().__init__(ErrorMessages.MISSING_KEY_FIELD.format(field=field), field=field, **log_context)


class DuplicateEntityError(ValidationError):
    """A row with the same uniqueness key is already stored."""

    def __init__(self, entity: str, field: str, identifier: Any, **log_context: Any):
        detail = ErrorMessages.ENTITY_EXISTS.format(entity=entity, field=field, key=identifier)
        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Unexpected failure (500), logged at error level.

    Usage:
        raise InternalError("Entity registry is empty")
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed. The driver error is kept on ``cause``."""

    def __init__(self, entity: str, operation: str, cause: BaseException | str | None = None, **log_context: Any):
        self.entity = entity
        self.operation = operation
        self.cause = cause
        detail = ErrorMessages.OPERATION_FAILED.format(operation=operation, entity=entity)
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail, entity=entity, operation=operation, **log_context)


@contextmanager
def wrap_database_errors(entity: str, operation: str) -> Iterator[None]:
    """
    Re-raise anything but an AppException as DatabaseError.

    Usage:
        with wrap_database_errors("Customer", "create"):
            row = await database.execute_returning(sql, values)
    """
    try:
        yield
    except AppException:
        raise
    except Exception as exc:
        raise DatabaseError(entity, operation, cause=exc) from exc
