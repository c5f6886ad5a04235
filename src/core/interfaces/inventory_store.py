"""Abstract interface for product valuation storage."""

from abc import ABC, abstractmethod

from src.core.entities.inventory import ProductValuation, StockMovement


class IProductValuationStore(ABC):
    """
    Interface for product valuation snapshots and the stock-movement ledger.

    Implementations own per-product serialization: a save whose
    ``expected_version`` no longer matches the stored snapshot must fail
    with ConcurrencyConflictError rather than overwrite it.
    """

    @abstractmethod
    async def create_product(self, product: ProductValuation) -> ProductValuation:
        """Create a new product valuation snapshot."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> ProductValuation | None:
        """Get product valuation snapshot by product ID."""
        pass

    @abstractmethod
    async def save_product(
        self,
        product: ProductValuation,
        movements: list[StockMovement],
        expected_version: int,
    ) -> ProductValuation:
        """
        Persist a snapshot and its ledger records in one transaction.

        Returns the stored snapshot with its version bumped.
        """
        pass

    @abstractmethod
    async def list_products(
        self, limit: int = 100, offset: int = 0
    ) -> list[ProductValuation]:
        """List product snapshots with pagination."""
        pass

    @abstractmethod
    async def get_movements(
        self, product_id: str, limit: int = 100, after_id: int | None = None
    ) -> list[StockMovement]:
        """
        Get ledger records for a product, oldest first.

        ``after_id`` pages through the ledger: only rows written after that
        record are returned.
        """
        pass
