"""
Repository for entities keyed by a caller-supplied code (customers, lines).
"""

from typing import Any, Mapping

from shared.config.constants import ErrorMessages
from shared.utils.exceptions import ValidationError
from shared.utils.validators import is_valid_code

from qc_api.generic.config import CodeKey
from qc_api.generic.query_builder import WhereClause
from qc_api.generic.repositories.base import EntityRepository


class CodeEntityRepository(EntityRepository):
    """
    Codes are trimmed and format-checked before use. Uniqueness is
    case-insensitive; name lookup is an exact, case-insensitive match.
    """

    @property
    def key_spec(self) -> CodeKey:
        return self.config.primary_key

    def _clean_code(self, key: Any) -> str:
        spec = self.key_spec
        if isinstance(key, Mapping):
            key = key.get(spec.field)
        if not is_valid_code(key, spec.pattern, spec.max_length):
            raise ValidationError(ErrorMessages.INVALID_CODE, entity=self.config.entity_name, code=key)
        return key.strip()

    def normalize_key(self, key: Any) -> dict[str, Any]:
        return {self.key_spec.field: self._clean_code(key)}

    def uniqueness_key(self, data: Mapping[str, Any]) -> Any | None:
        code = data.get(self.key_spec.field)
        return code.strip() if isinstance(code, str) else code

    def exists_clause(self, key: Any) -> WhereClause:
        field = self.key_spec.field
        return WhereClause().add(f"LOWER({field}) = LOWER({{}})", self._clean_code(key))

    def name_clause(self, name: str) -> WhereClause:
        return WhereClause().add(f"LOWER({self.config.name_field}) = LOWER({{}})", name.strip())

    def prepare_insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        values = super().prepare_insert(data)
        field = self.key_spec.field
        if isinstance(values.get(field), str):
            values[field] = values[field].strip()
        return values
