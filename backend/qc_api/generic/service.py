"""
Business service layer for generic entities.

Services wrap the validation engine and a repository and report every
outcome as a ServiceResult envelope. They never raise: framework errors
become ``fail(detail, status_code)`` and anything unexpected becomes
``fail("Failed to <op> <entity>: <cause>", 500)``.

Architecture:
    Router (thin) -> Service (envelope) -> ValidationEngine + Repository -> Database

Usage:
    service = EntityService(config, repository, ValidationEngine(config))
    result = await service.create({"code": "C0001", "name": "Acme"}, actor_id=7)
    if not result.success:
        ...
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from fastapi import status

from shared.config.constants import AuditFields, ErrorMessages, Operation
from shared.config.logging import get_logger
from shared.utils.exceptions import AppException, DuplicateEntityError, NotFoundError, ValidationError
from shared.utils.health import HealthStatus
from shared.utils.validators import sanitize_search_term

from qc_api.generic.config import EntityConfig
from qc_api.generic.options import QueryOptions
from qc_api.generic.repositories import CompositeEntityRepository, EntityRepository
from qc_api.generic.validation import ValidationEngine

_TRUE_STRINGS = {"true", "1", "active", "yes"}
_FALSE_STRINGS = {"false", "0", "inactive", "no"}


@dataclass
class ServiceResult:
    """
    Response envelope.

    ``status_code`` is a hint for the router and is not serialized.
    """

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    pagination: dict[str, Any] | None = None
    status_code: int = status.HTTP_200_OK

    @classmethod
    def ok(
        cls,
        data: Any = None,
        message: str | None = None,
        pagination: dict[str, Any] | None = None,
        status_code: int = status.HTTP_200_OK,
    ) -> "ServiceResult":
        return cls(success=True, data=data, message=message, pagination=pagination, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> "ServiceResult":
        return cls(success=False, error=error, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        body: dict[str, Any] = {"success": True, "data": self.data}
        if self.message:
            body["message"] = self.message
        if self.pagination is not None:
            body["pagination"] = self.pagination
        return body


def parse_status(value: Any) -> bool:
    """
    Accept a bool or a common textual spelling of one.

    Raises:
        ValidationError: For anything else.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError("status must be true or false", value=value)


def typed_predicates(predicates: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert query-string predicate values to the column types they are
    compared against: ``is_active`` to bool, actor id columns to int.

    Raises:
        ValidationError: Listing every value that does not convert.
    """
    typed: dict[str, Any] = {}
    errors = []
    for name, value in predicates.items():
        if value is None or not isinstance(value, str):
            typed[name] = value
        elif name == AuditFields.IS_ACTIVE:
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS or lowered in _FALSE_STRINGS:
                typed[name] = lowered in _TRUE_STRINGS
            else:
                errors.append(f"{name} must be true or false")
        elif name in AuditFields.INTEGER:
            try:
                typed[name] = int(value.strip())
            except ValueError:
                errors.append(f"{name} must be an integer")
        else:
            typed[name] = value
    if errors:
        raise ValidationError(errors, predicates=list(predicates))
    return typed


class EntityService:
    """
    Envelope-returning operations for one entity.

    Args:
        config: Entity configuration.
        repository: Repository matching the config's key kind.
        validator: Validation engine (a bare one is built when omitted).
        logger: Optional logger.
    """

    def __init__(
        self,
        config: EntityConfig,
        repository: EntityRepository,
        validator: ValidationEngine | None = None,
        logger=None,
    ):
        self.config = config
        self.repository = repository
        self.validator = validator or ValidationEngine(config)
        self.logger = logger or get_logger(__name__)

    @property
    def entity_name(self) -> str:
        return self.config.display_name

    async def _run(self, operation: str, call: Callable[[], Awaitable[ServiceResult]]) -> ServiceResult:
        try:
            return await call()
        except AppException as e:
            return ServiceResult.fail(str(e.detail), e.status_code)
        except Exception as e:
            error = ErrorMessages.OPERATION_FAILED.format(operation=operation, entity=self.entity_name)
            self.logger.error(error, entity=self.config.entity_name, error=str(e), exc_info=True)
            return ServiceResult.fail(f"{error}: {e}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _check_term(self, value: Any, label: str) -> str:
        term, error = sanitize_search_term(value if isinstance(value, str) else None, label)
        if error:
            raise ValidationError(error, entity=self.config.entity_name)
        return term

    # =========================================================================
    # Read operations
    # =========================================================================

    async def get_by_key(self, key: Any) -> ServiceResult:
        async def run():
            row = await self.repository.get_by_key(key)
            if row is None:
                raise NotFoundError(self.entity_name, key)
            return ServiceResult.ok(row)

        return await self._run("fetch", run)

    async def get_all(self, options: QueryOptions | None = None) -> ServiceResult:
        async def run():
            page = await self.repository.list(options)
            return ServiceResult.ok(page.rows, pagination=page.pagination)

        return await self._run("list", run)

    async def search(self, pattern: Any, options: QueryOptions | None = None) -> ServiceResult:
        async def run():
            term = self._check_term(pattern, "Search pattern")
            page = await self.repository.search(term, options)
            return ServiceResult.ok(page.rows, pagination=page.pagination)

        return await self._run("search", run)

    async def get_by_name(self, name: Any, options: QueryOptions | None = None) -> ServiceResult:
        async def run():
            term = self._check_term(name, "Name")
            page = await self.repository.get_by_name(term, options)
            return ServiceResult.ok(page.rows, pagination=page.pagination)

        return await self._run("search", run)

    async def filter_status(self, is_active: Any, options: QueryOptions | None = None) -> ServiceResult:
        async def run():
            page = await self.repository.filter_status(parse_status(is_active), options)
            return ServiceResult.ok(page.rows, pagination=page.pagination)

        return await self._run("filter", run)

    # =========================================================================
    # Write operations
    # =========================================================================

    async def create(self, data: Any, actor_id: int | None) -> ServiceResult:
        """Validate, reject duplicates, then persist."""
        async def run():
            self.validator.ensure_valid(data, Operation.CREATE)

            unique_key = self.repository.uniqueness_key(data)
            if unique_key is not None and await self.repository.exists(unique_key):
                label = unique_key if not isinstance(unique_key, Mapping) else self.repository.key_label(unique_key)
                raise DuplicateEntityError(self.entity_name, " + ".join(self.config.key_fields), label)

            row = await self.repository.create(data, actor_id)
            return ServiceResult.ok(
                row,
                message=f"{self.entity_name} created successfully",
                status_code=status.HTTP_201_CREATED,
            )

        return await self._run("create", run)

    async def update(self, key: Any, data: Any, actor_id: int | None) -> ServiceResult:
        async def run():
            self.validator.ensure_valid(data, Operation.UPDATE)
            row = await self.repository.update(key, data, actor_id)
            return ServiceResult.ok(row, message=f"{self.entity_name} updated successfully")

        return await self._run("update", run)

    async def delete(self, key: Any, actor_id: int | None = None) -> ServiceResult:
        async def run():
            if not await self.repository.delete(key, actor_id):
                raise NotFoundError(self.entity_name, key)
            return ServiceResult.ok(None, message=f"{self.entity_name} deleted successfully")

        return await self._run("delete", run)

    async def change_status(self, key: Any, actor_id: int | None) -> ServiceResult:
        async def run():
            row = await self.repository.change_status(key, actor_id)
            if row is None:
                raise NotFoundError(self.entity_name, key)
            state = "activated" if row.get("is_active") else "deactivated"
            return ServiceResult.ok(row, message=f"{self.entity_name} {state} successfully")

        return await self._run("change status of", run)

    # =========================================================================
    # Health, statistics, validation
    # =========================================================================

    async def get_health(self) -> ServiceResult:
        async def run():
            health = await self.repository.health()
            code = (
                status.HTTP_503_SERVICE_UNAVAILABLE
                if health.status == HealthStatus.UNHEALTHY
                else status.HTTP_200_OK
            )
            return ServiceResult.ok(health.to_dict(), status_code=code)

        return await self._run("check health of", run)

    async def get_statistics(self) -> ServiceResult:
        async def run():
            stats = await self.repository.statistics()
            return ServiceResult.ok({"overview": stats})

        return await self._run("fetch statistics for", run)

    async def validate(self, data: Any, operation: Operation | str = Operation.CREATE) -> ServiceResult:
        async def run():
            return ServiceResult.ok(self.validator.validate(data, operation).to_dict())

        return await self._run("validate", run)


class CompositeEntityService(EntityService):
    """Adds predicate filtering and grouped summaries for composite-key entities."""

    repository: CompositeEntityRepository

    async def filter_records(self, predicates: Mapping[str, Any], options: QueryOptions | None = None) -> ServiceResult:
        async def run():
            page = await self.repository.filter(typed_predicates(predicates), options)
            return ServiceResult.ok(page.rows, pagination=page.pagination)

        return await self._run("filter", run)

    async def get_summary(self, group_by: str | None = None) -> ServiceResult:
        async def run():
            return ServiceResult.ok(await self.repository.summary(group_by))

        return await self._run("summarize", run)
