"""
Repository for entities keyed by a database-assigned integer (defects,
sampling reasons).
"""

from typing import Any, Mapping

from shared.config.constants import ErrorMessages
from shared.utils.exceptions import ValidationError

from qc_api.generic.repositories.base import EntityRepository


class SerialEntityRepository(EntityRepository):

    @property
    def key_field(self) -> str:
        return self.config.primary_key.field

    def normalize_key(self, key: Any) -> dict[str, Any]:
        if isinstance(key, Mapping):
            key = key.get(self.key_field)
        # bool is an int subclass
        if isinstance(key, bool) or key is None:
            raise ValidationError(ErrorMessages.INVALID_ID, entity=self.config.entity_name, id=key)
        try:
            value = int(str(key).strip())
        except ValueError:
            raise ValidationError(ErrorMessages.INVALID_ID, entity=self.config.entity_name, id=key) from None
        if value < 1:
            raise ValidationError(ErrorMessages.INVALID_ID, entity=self.config.entity_name, id=key)
        return {self.key_field: value}

    def prepare_insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        if self.key_field in data:
            self.logger.warning(
                "Ignoring caller-supplied id on create",
                entity=self.config.entity_name,
                supplied=data[self.key_field],
            )
        # insertable_fields never includes the serial key
        return super().prepare_insert(data)
