"""
Payload validation for create and update operations.

Errors accumulate: one call reports every problem it finds. Entity-specific
rules plug in through ``extra_rules``, which always runs after the base
rules and whose messages are appended to theirs.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from shared.config.constants import AuditFields, ErrorMessages, KeyKind, Operation
from shared.config.logging import get_logger
from shared.utils.exceptions import ValidationError

from qc_api.generic.config import CodeKey, EntityConfig

# (data, operation) -> list of error messages
ExtraRules = Callable[[Mapping[str, Any], Operation], list[str]]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_if_invalid(self, entity: str) -> None:
        if self.errors:
            raise ValidationError(self.errors, entity=entity)

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


class ValidationEngine:
    """Checks payloads against an EntityConfig plus optional extra rules."""

    def __init__(self, config: EntityConfig, extra_rules: ExtraRules | None = None, logger=None):
        self.config = config
        self.extra_rules = extra_rules
        self.logger = logger or get_logger(__name__)

    def required_for_create(self) -> tuple[str, ...]:
        keys = () if self.config.key_kind == KeyKind.SERIAL else self.config.key_fields
        return tuple(dict.fromkeys((*keys, *self.config.required_fields)))

    def validate(self, data: Any, operation: Operation | str = Operation.CREATE) -> ValidationResult:
        operation = Operation(operation)
        if not isinstance(data, Mapping):
            return ValidationResult([ErrorMessages.INVALID_PAYLOAD])

        errors: list[str] = []
        config = self.config

        if operation == Operation.CREATE:
            for name in self.required_for_create():
                if _is_blank(data.get(name)):
                    errors.append(ErrorMessages.REQUIRED_FIELD.format(field=name))
        else:
            # Present required fields may not be cleared
            for name in config.required_fields:
                if name in data and _is_blank(data[name]):
                    errors.append(ErrorMessages.REQUIRED_FIELD.format(field=name))

        for name in data:
            if name not in config.payload_fields:
                errors.append(ErrorMessages.UNKNOWN_FIELD.format(field=name))

        if AuditFields.IS_ACTIVE in data and not isinstance(data[AuditFields.IS_ACTIVE], bool):
            errors.append(ErrorMessages.IS_ACTIVE_BOOLEAN)

        for name, value in data.items():
            if isinstance(value, str) and name in config.payload_fields:
                limit = config.max_length_for(name)
                if len(value) > limit:
                    errors.append(ErrorMessages.FIELD_TOO_LONG.format(field=name, limit=limit))

        key = config.primary_key
        if operation == Operation.CREATE and isinstance(key, CodeKey):
            code = data.get(key.field)
            if isinstance(code, str) and code.strip() and not re.match(key.pattern, code.strip()):
                errors.append(ErrorMessages.INVALID_CODE_FORMAT.format(field=key.field))

        if self.extra_rules is not None:
            errors.extend(self.extra_rules(data, operation))

        if errors:
            self.logger.debug(
                "Validation failed",
                entity=config.entity_name,
                operation=operation.value,
                errors=len(errors),
            )
        return ValidationResult(errors)

    def ensure_valid(self, data: Any, operation: Operation | str = Operation.CREATE) -> None:
        """
        Raises:
            ValidationError: With every accumulated message.
        """
        self.validate(data, operation).raise_if_invalid(self.config.entity_name)
