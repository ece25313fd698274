"""
Customer/site pairs. A row is identified by the customer code and the site
code together; ``code`` is the short label used on labels and reports.
"""

from typing import Any, Mapping

from shared.config.constants import Operation

from qc_api.generic import CompositeKey, EntityConfig, EntityDefinition


def customer_site_rules(data: Mapping[str, Any], operation: Operation) -> list[str]:
    code = data.get("code")
    if isinstance(code, str) and code.strip() and not code.strip().isalnum():
        return ["code may only contain letters and digits"]
    return []


CUSTOMER_SITE = EntityDefinition(
    config=EntityConfig(
        entity_name="customer_site",
        table_name="customers_site",
        api_path="/customer-sites",
        primary_key=CompositeKey(fields=("customers", "site")),
        searchable_fields=("code", "customers", "site"),
        required_fields=("code",),
        writable_fields=("code",),
        field_max_lengths={"code": 10, "customers": 5, "site": 5},
        name_field=None,
        default_limit=20,
        max_limit=100,
    ),
    extra_rules=customer_site_rules,
)
