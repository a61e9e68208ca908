"""
Services for variant quantity resolution and collection valuation.
"""

from variantvault.services.collection_aggregator import (
    group_holdings,
    list_owned_cards,
    summarize_collection,
)
from variantvault.services.quantity_resolver import (
    build_quantity_map,
    resolve_quantities,
    validate_card_batch,
)
from variantvault.services.variant_mapper import (
    check_mapping_tables,
    empty_variant_quantities,
    parse_ui_variant,
    to_stored_code,
    to_ui_variant,
)

__all__ = [
    "build_quantity_map",
    "check_mapping_tables",
    "empty_variant_quantities",
    "group_holdings",
    "list_owned_cards",
    "parse_ui_variant",
    "resolve_quantities",
    "summarize_collection",
    "to_stored_code",
    "to_ui_variant",
    "validate_card_batch",
]
