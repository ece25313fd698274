"""Final visual inspection lines."""

from qc_api.generic import CodeKey, EntityConfig, EntityDefinition

LINE_FVI = EntityDefinition(
    config=EntityConfig(
        entity_name="line_fvi",
        table_name="line_fvi",
        api_path="/line-fvi",
        primary_key=CodeKey(field="code", max_length=5),
        searchable_fields=("code", "name"),
        required_fields=("name",),
        field_max_lengths={"name": 100},
        default_limit=20,
        max_limit=100,
        display_name="Line FVI",
    ),
)
