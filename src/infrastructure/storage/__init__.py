"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteManufacturingOrderStore,
    SQLiteProductValuationStore,
    SQLiteStageStore,
    close_pool,
    get_connection,
    get_order_store,
    get_pool,
    get_product_store,
    get_stage_store,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteProductValuationStore",
    "SQLiteStageStore",
    "SQLiteManufacturingOrderStore",
    "get_product_store",
    "get_stage_store",
    "get_order_store",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
