from variantvault.db.database import get_session, init_db
from variantvault.db.operations import (
    fetch_exchange_rate,
    fetch_holdings,
    fetch_unit_prices,
    fetch_variant_rows,
    get_collection_item,
    set_variant_quantity,
)

__all__ = [
    "fetch_exchange_rate",
    "fetch_holdings",
    "fetch_unit_prices",
    "fetch_variant_rows",
    "get_collection_item",
    "get_session",
    "init_db",
    "set_variant_quantity",
]
