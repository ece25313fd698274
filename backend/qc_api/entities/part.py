"""Part master. Keyed by part number alone but stored as a composite-pattern table."""

from qc_api.generic import CompositeKey, EntityConfig, EntityDefinition

PART_FIELDS = (
    "product_families",
    "versions",
    "production_site",
    "part_site",
    "customer",
    "tab",
    "product_type",
    "customer_driver",
)

PART = EntityDefinition(
    config=EntityConfig(
        entity_name="part",
        table_name="parts",
        api_path="/parts",
        primary_key=CompositeKey(fields=("partno",)),
        searchable_fields=("partno", *PART_FIELDS),
        required_fields=PART_FIELDS,
        writable_fields=PART_FIELDS,
        field_max_lengths={
            "partno": 25,
            "product_families": 10,
            "versions": 10,
            "production_site": 5,
            "part_site": 5,
            "customer": 5,
            "tab": 5,
            "product_type": 5,
            "customer_driver": 200,
        },
        name_field=None,
        default_limit=20,
        max_limit=100,
    ),
)
