"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.product_store import SQLiteProductValuationStore
from src.infrastructure.storage.sqlite.stage_store import (
    SQLiteManufacturingOrderStore,
    SQLiteStageStore,
)

# Type aliases for convenience
ProductStore = SQLiteProductValuationStore
StageStore = SQLiteStageStore
OrderStore = SQLiteManufacturingOrderStore

# Stores hold no state of their own; connections come from the global pool
_product_store: SQLiteProductValuationStore | None = None
_stage_store: SQLiteStageStore | None = None
_order_store: SQLiteManufacturingOrderStore | None = None


async def get_product_store() -> SQLiteProductValuationStore:
    """Get singleton product valuation store instance."""
    global _product_store
    if _product_store is None:
        _product_store = SQLiteProductValuationStore()
    return _product_store


async def get_stage_store() -> SQLiteStageStore:
    """Get singleton stage store instance."""
    global _stage_store
    if _stage_store is None:
        _stage_store = SQLiteStageStore()
    return _stage_store


async def get_order_store() -> SQLiteManufacturingOrderStore:
    """Get singleton manufacturing order store instance."""
    global _order_store
    if _order_store is None:
        _order_store = SQLiteManufacturingOrderStore()
    return _order_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteProductValuationStore",
    "SQLiteStageStore",
    "SQLiteManufacturingOrderStore",
    # Type aliases
    "ProductStore",
    "StageStore",
    "OrderStore",
    # Factory functions
    "get_product_store",
    "get_stage_store",
    "get_order_store",
]
