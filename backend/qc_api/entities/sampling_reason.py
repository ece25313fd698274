"""Reasons an inspection lot was sampled."""

import re
from typing import Any, Mapping

from shared.config.constants import Operation

from qc_api.generic import EntityConfig, EntityDefinition, SerialKey

NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _.\-]+$")


def sampling_reason_rules(data: Mapping[str, Any], operation: Operation) -> list[str]:
    errors = []

    name = data.get("name")
    if isinstance(name, str) and name.strip():
        if name != name.strip():
            errors.append("Sampling reason name cannot have leading or trailing spaces")
        if not NAME_PATTERN.match(name.strip()):
            errors.append(
                "Sampling reason name contains invalid characters. "
                "Use only letters, numbers, spaces, hyphens, underscores, and dots"
            )

    if data.get("description") == "":
        errors.append("Sampling reason description cannot be empty if provided. Use null to remove description")

    return errors


SAMPLING_REASON = EntityDefinition(
    config=EntityConfig(
        entity_name="sampling_reason",
        table_name="sampling_reasons",
        api_path="/sampling-reasons",
        primary_key=SerialKey(),
        searchable_fields=("name", "description"),
        required_fields=("name",),
        writable_fields=("name", "description"),
        field_max_lengths={"name": 100},
        default_limit=20,
        max_limit=100,
    ),
    extra_rules=sampling_reason_rules,
)
