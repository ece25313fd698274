"""Customers: 5-character codes, searched by code and name."""

from qc_api.generic import CodeKey, EntityConfig, EntityDefinition

CUSTOMER = EntityDefinition(
    config=EntityConfig(
        entity_name="customer",
        table_name="customers",
        api_path="/customers",
        primary_key=CodeKey(field="code", max_length=5),
        searchable_fields=("code", "name"),
        required_fields=("name",),
        field_max_lengths={"name": 100},
        default_limit=20,
        max_limit=100,
    ),
)
