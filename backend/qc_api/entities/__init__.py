"""
Entity registry.

Each module declares one EntityDefinition; the application wires every
definition listed here.
"""

from qc_api.generic import EntityDefinition

from .customer import CUSTOMER
from .customer_site import CUSTOMER_SITE
from .defect import DEFECT
from .line_fvi import LINE_FVI
from .part import PART
from .sampling_reason import SAMPLING_REASON

ENTITY_DEFINITIONS: tuple[EntityDefinition, ...] = (
    CUSTOMER,
    LINE_FVI,
    CUSTOMER_SITE,
    PART,
    DEFECT,
    SAMPLING_REASON,
)


def get_definition(entity_name: str) -> EntityDefinition | None:
    for definition in ENTITY_DEFINITIONS:
        if definition.config.entity_name == entity_name:
            return definition
    return None


__all__ = [
    "ENTITY_DEFINITIONS",
    "get_definition",
    "CUSTOMER",
    "CUSTOMER_SITE",
    "DEFECT",
    "LINE_FVI",
    "PART",
    "SAMPLING_REASON",
]
