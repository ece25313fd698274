"""
Defect catalogue. Defects are referenced by inspection records, so delete
only deactivates them.
"""

from shared.config.constants import DeleteMode

from qc_api.generic import EntityConfig, EntityDefinition, SerialKey

DEFECT = EntityDefinition(
    config=EntityConfig(
        entity_name="defect",
        table_name="defects",
        api_path="/defects",
        primary_key=SerialKey(),
        searchable_fields=("name", "description"),
        required_fields=("name",),
        writable_fields=("name", "description", "defect_group"),
        field_max_lengths={"name": 100, "defect_group": 100},
        default_limit=30,
        max_limit=200,
        delete_mode=DeleteMode.SOFT,
    ),
)
