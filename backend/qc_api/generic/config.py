"""
Entity configuration for the generic CRUD framework.

An EntityConfig is declared once per entity and shared, read-only, by the
query builder, repository, validation engine, service and router built for
that entity. Table and column names taken from it are the only identifiers
ever interpolated into SQL, so construction rejects anything that is not a
plain identifier.
"""

import re
from dataclasses import dataclass, field
from typing import ClassVar, Mapping, Union

from shared.config.constants import AuditFields, DeleteMode, KeyKind, Limits

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_CODE_PATTERN = r"^[A-Za-z0-9_-]+$"


def _check_identifier(value: str, what: str) -> None:
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise ValueError(f"{what} must be a plain SQL identifier, got {value!r}")


# =============================================================================
# Primary Key Specs
# =============================================================================


@dataclass(frozen=True)
class CodeKey:
    """Caller-supplied string key, unique case-insensitively."""

    field: str = "code"
    max_length: int = Limits.DEFAULT_CODE_LENGTH
    pattern: str = DEFAULT_CODE_PATTERN

    kind: ClassVar[KeyKind] = KeyKind.CODE

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)


@dataclass(frozen=True)
class SerialKey:
    """Database-assigned integer key."""

    field: str = "id"

    kind: ClassVar[KeyKind] = KeyKind.SERIAL

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)


@dataclass(frozen=True)
class CompositeKey:
    """Ordered set of columns that together identify a row."""

    fields: tuple[str, ...]

    kind: ClassVar[KeyKind] = KeyKind.COMPOSITE

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        if not self.fields:
            raise ValueError("CompositeKey needs at least one field")
        if len(set(self.fields)) != len(self.fields):
            raise ValueError("CompositeKey fields must be unique")


PrimaryKeySpec = Union[CodeKey, SerialKey, CompositeKey]


# =============================================================================
# Entity Config
# =============================================================================


@dataclass(frozen=True)
class EntityConfig:
    """
    Declarative description of one entity table.

    Only ``entity_name``, ``table_name``, ``api_path`` and ``primary_key`` are
    required. ``writable_fields`` defaults to the union of required,
    searchable and name fields minus the key; sort and delete defaults come
    from the key kind (code/serial: key ascending, hard delete; composite:
    newest first, soft delete).
    """

    entity_name: str
    table_name: str
    api_path: str
    primary_key: PrimaryKeySpec
    searchable_fields: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()
    writable_fields: tuple[str, ...] = ()
    field_max_lengths: Mapping[str, int] = field(default_factory=dict)
    exclude_from_update: tuple[str, ...] = ()
    name_field: str | None = "name"
    default_limit: int = Limits.DEFAULT_PAGE_SIZE
    max_limit: int = Limits.MAX_PAGE_SIZE
    default_sort_by: str | None = None
    default_sort_order: str | None = None
    delete_mode: DeleteMode | None = None
    display_name: str | None = None

    def __post_init__(self):
        for attr in ("searchable_fields", "required_fields", "writable_fields", "exclude_from_update"):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))
        object.__setattr__(self, "field_max_lengths", dict(self.field_max_lengths))

        if not self.entity_name:
            raise ValueError("entity_name is required")
        if not self.api_path.startswith("/"):
            raise ValueError(f"api_path must start with '/', got {self.api_path!r}")
        _check_identifier(self.table_name, "table_name")
        if not 1 <= self.default_limit <= self.max_limit:
            raise ValueError(
                f"default_limit must be between 1 and max_limit ({self.max_limit}), got {self.default_limit}"
            )

        key_fields = self.primary_key.fields
        if not self.writable_fields:
            derived = [*self.required_fields, *self.searchable_fields]
            if self.name_field:
                derived.append(self.name_field)
            writable = tuple(dict.fromkeys(f for f in derived if f not in key_fields))
            object.__setattr__(self, "writable_fields", writable)

        if self.display_name is None:
            object.__setattr__(self, "display_name", self.entity_name.replace("_", " ").capitalize())
        if self.delete_mode is None:
            mode = DeleteMode.SOFT if self.primary_key.kind == KeyKind.COMPOSITE else DeleteMode.HARD
            object.__setattr__(self, "delete_mode", mode)
        if self.default_sort_by is None:
            sort_by = AuditFields.CREATED_AT if self.primary_key.kind == KeyKind.COMPOSITE else key_fields[0]
            object.__setattr__(self, "default_sort_by", sort_by)
        if self.default_sort_order is None:
            order = "DESC" if self.primary_key.kind == KeyKind.COMPOSITE else "ASC"
            object.__setattr__(self, "default_sort_order", order)

        for name in self.columns:
            _check_identifier(name, "column name")
        columns = set(self.columns)
        for attr in ("searchable_fields", "required_fields", "exclude_from_update"):
            unknown = [f for f in getattr(self, attr) if f not in columns]
            if unknown:
                raise ValueError(f"{attr} references unknown columns: {unknown}")
        if self.name_field and self.name_field not in columns:
            raise ValueError(f"name_field {self.name_field!r} is not a column")
        if self.default_sort_by not in self.sortable_fields:
            raise ValueError(f"default_sort_by {self.default_sort_by!r} is not sortable")

    # =========================================================================
    # Derived column sets
    # =========================================================================

    @property
    def key_kind(self) -> KeyKind:
        return self.primary_key.kind

    @property
    def key_fields(self) -> tuple[str, ...]:
        return self.primary_key.fields

    @property
    def columns(self) -> tuple[str, ...]:
        """Every column the framework may reference, in a stable order."""
        return tuple(dict.fromkeys((*self.key_fields, *self.writable_fields, *AuditFields.ALL)))

    @property
    def sortable_fields(self) -> frozenset[str]:
        sortable = {*self.key_fields, *self.searchable_fields, *AuditFields.SORTABLE}
        if self.name_field:
            sortable.add(self.name_field)
        return frozenset(sortable)

    @property
    def insertable_fields(self) -> tuple[str, ...]:
        """Payload columns accepted on create (serial ids are never caller-supplied)."""
        keys = () if self.key_kind == KeyKind.SERIAL else self.key_fields
        return tuple(dict.fromkeys((*keys, *self.writable_fields, AuditFields.IS_ACTIVE)))

    @property
    def updatable_fields(self) -> tuple[str, ...]:
        excluded = set(self.exclude_from_update) | set(self.key_fields)
        return tuple(f for f in (*self.writable_fields, AuditFields.IS_ACTIVE) if f not in excluded)

    @property
    def payload_fields(self) -> frozenset[str]:
        """Fields a create/update payload may carry without being rejected."""
        return frozenset((*self.key_fields, *self.writable_fields, *AuditFields.ALL))

    def max_length_for(self, field_name: str) -> int:
        if field_name in self.field_max_lengths:
            return self.field_max_lengths[field_name]
        if isinstance(self.primary_key, CodeKey) and field_name == self.primary_key.field:
            return self.primary_key.max_length
        if field_name in self.key_fields:
            return Limits.MAX_KEY_LENGTH
        return Limits.MAX_STRING_LENGTH
